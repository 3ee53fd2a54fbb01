# app.py
"""
Stockflow - Main Entry Point

Version: 1.0.0
"""

import streamlit as st
from stockflow import __version__
from stockflow.api_client import check_api_connection
from stockflow.config import config, IS_RUNNING_ON_CLOUD
import logging

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.is_feature_enabled('debug_mode') else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Stockflow"
APP_ICON = "📦"

st.set_page_config(
    page_title=f"{APP_NAME} - Inventory",
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #2e7d32;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .info-card {
        background: #f8f9fa;
        padding: 1.5rem;
        border-radius: 0.5rem;
        border-left: 4px solid #2e7d32;
        margin-bottom: 1rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)


# ==================== HELPER FUNCTIONS ====================

def show_home_page():
    """Display the landing page with the available workflows"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Goods receiving, packaging and stock allocation</p>', unsafe_allow_html=True)

    api_ok, api_error = check_api_connection()
    if not api_ok:
        st.error(f"⚠️ {api_error}")
        st.info("Check API_BASE_URL in your environment or the [API] section of the app secrets.")
        return

    st.markdown("### 🧭 Workflows")

    st.markdown("""
    <div class="info-card">
        <strong>🚚 Receive Goods</strong><br>
        <span style="color: #666;">Receive purchase order lines as flat quantities or through packaging structures (pallets, cases, boxes, pieces).</span>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("""
    <div class="info-card">
        <strong>📦 Allocation Opportunities</strong><br>
        <span style="color: #666;">Distribute newly received stock to waiting transactions, oldest first.</span>
    </div>
    """, unsafe_allow_html=True)

    if config.is_feature_enabled('debug_mode'):
        st.markdown("---")
        with st.expander("🔧 System Status"):
            col1, col2 = st.columns(2)
            with col1:
                st.metric("Environment", "Cloud" if IS_RUNNING_ON_CLOUD else "Local")
            with col2:
                st.metric("API", config.get_api_config().base_url)

    # Footer
    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{__version__}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    show_home_page()


if __name__ == "__main__":
    main()
