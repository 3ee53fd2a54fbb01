"""
Stockflow - stock allocation and packaging conversion for inventory operations

This package contains:
- config: Configuration management (local + Streamlit Cloud)
- api_client: Inventory REST API session and request helpers
- packaging: Packaging structures and base-unit conversion
- receiving: Goods receipt against purchase orders
- allocation: Matching received stock to waiting demand

Usage:
    from stockflow.config import config
    from stockflow.packaging import define_structure, convert_to_base_units
    from stockflow.allocation import AllocationService, toggle_demand
"""

# Configuration
from .config import (
    config,
    Config,
    IS_RUNNING_ON_CLOUD,
    API_CONFIG,
    APP_CONFIG,
)

# API
from .api_client import (
    ApiError,
    ApiClient,
    get_api_session,
    reset_api_session,
    check_api_connection,
)

# Errors
from .errors import (
    StockflowError,
    ValidationError,
    ConstraintViolation,
    InvalidTransitionError,
    CommitFailure,
)

__all__ = [
    # Config
    'config',
    'Config',
    'IS_RUNNING_ON_CLOUD',
    'API_CONFIG',
    'APP_CONFIG',

    # API
    'ApiError',
    'ApiClient',
    'get_api_session',
    'reset_api_session',
    'check_api_connection',

    # Errors
    'StockflowError',
    'ValidationError',
    'ConstraintViolation',
    'InvalidTransitionError',
    'CommitFailure',
]

__version__ = '1.0.0'
