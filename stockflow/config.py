# stockflow/config.py
"""
Centralized Configuration Management

Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Environment detection
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any
from dataclasses import dataclass, field

# Initialize logger
logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:3000/api"


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


@dataclass
class ApiConfig:
    """Inventory REST API configuration container"""
    base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = 30.0
    headers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'base_url': self.base_url,
            'timeout_seconds': self.timeout_seconds,
            'headers': dict(self.headers),
        }

    def build_url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


class Config:
    """
    Centralized configuration management

    Usage:
        from stockflow.config import config

        # Get API config
        api_config = config.get_api_config()

        # Get app settings
        ttl = config.get_app_setting("CACHE_TTL_SECONDS", 60)

        # Check feature flags
        if config.is_feature_enabled("PACKAGING"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        api_secrets = st.secrets.get("API", {})
        headers = {}
        if api_secrets.get("TOKEN"):
            headers["Authorization"] = f"Bearer {api_secrets.get('TOKEN')}"

        self._api_config = ApiConfig(
            base_url=api_secrets.get("BASE_URL", DEFAULT_API_BASE_URL),
            timeout_seconds=float(api_secrets.get("TIMEOUT_SECONDS", 30)),
            headers=headers,
        )

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        headers = {}
        token = os.getenv("API_TOKEN")
        if token:
            headers["Authorization"] = f"Bearer {token}"
        # Bypass the ngrok interstitial page when the API is tunnelled
        if os.getenv("API_SKIP_NGROK_WARNING", "true").lower() == "true":
            headers["ngrok-skip-browser-warning"] = "true"

        self._api_config = ApiConfig(
            base_url=os.getenv("API_BASE_URL", DEFAULT_API_BASE_URL),
            timeout_seconds=float(os.getenv("API_TIMEOUT_SECONDS", "30")),
            headers=headers,
        )

        logger.info("💻 Running in LOCAL environment")

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Cache
            "CACHE_TTL_SECONDS": int(os.getenv("CACHE_TTL_SECONDS", "60")),

            # Packaging
            "DEFAULT_BASE_UNIT_NAME": os.getenv("DEFAULT_BASE_UNIT_NAME", "Piece"),
            "MAX_PACKAGING_LEVELS": int(os.getenv("MAX_PACKAGING_LEVELS", "4")),

            # Localization
            "DATE_FORMAT": os.getenv("DATE_FORMAT", "%d/%m/%Y"),

            # Feature flags
            "ENABLE_PACKAGING": os.getenv("ENABLE_PACKAGING", "true").lower() == "true",
            "ENABLE_DEBUG_MODE": os.getenv("ENABLE_DEBUG_MODE", "false").lower() == "true",
        }

    def _log_config_status(self):
        """Log configuration status"""
        logger.info(f"✅ Inventory API: {self._api_config.base_url}")
        logger.info(
            f"✅ API auth: {'Token' if 'Authorization' in self._api_config.headers else 'None'}"
        )

    # ==================== PUBLIC GETTERS ====================

    def get_api_config(self) -> ApiConfig:
        """Get API configuration"""
        return self._api_config

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, True)

    # ==================== PROPERTIES ====================

    @property
    def api_config(self) -> Dict[str, Any]:
        return self._api_config.to_dict()

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

IS_RUNNING_ON_CLOUD = config.is_cloud
API_CONFIG = config.api_config
APP_CONFIG = config.app_config

__all__ = [
    'config',
    'Config',
    'ApiConfig',
    'IS_RUNNING_ON_CLOUD',
    'API_CONFIG',
    'APP_CONFIG',
]
