"""
Streamlit app entrypoint - navigation, logging and the session identity.

Sign-in itself is handled outside this app; the sidebar lets the session act
as a citizen, provider or admin account so the role-gated pages can be used.
"""

from __future__ import annotations

import logging

import streamlit as st

st.set_page_config(page_title="Provider Directory", page_icon=":hospital:", layout="wide")

from src.app_logic import SESSION_USER_KEY, get_backend, session_role  # noqa: E402 - must import after set_page_config
from src.data.models import UserRole  # noqa: E402
from src.services.context import CurrentUser  # noqa: E402
from src.utils.config import get_app_config, validate_configuration  # noqa: E402

logger = logging.getLogger(__name__)

__all__ = ["configure_logging", "render_identity_sidebar"]

_nav_items = [
    ("pages/1_🔎_Search.py", "Search", "🔎"),
    ("pages/2_🏥_Provider_Profile.py", "Provider Profile", "🏥"),
    ("pages/10_🩺_Provider_Dashboard.py", "Provider Dashboard", "🩺"),
    ("pages/20_🛡️_Admin_Dashboard.py", "Admin Dashboard", "🛡️"),
    ("pages/30_📥_Bulk_Import.py", "Bulk Import", "📥"),
]


def configure_logging() -> None:
    level_name = str(get_app_config()["log_level"]).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def render_identity_sidebar() -> None:
    """Pick the account this session acts as."""
    current = st.session_state.get(SESSION_USER_KEY)
    roles = [r.value for r in UserRole]
    with st.sidebar:
        st.subheader("👤 Session")
        user_id = st.text_input("Account ID", value=current.id if current else "", key="identity_user_id")
        if user_id.strip() and (current is None or current.id != user_id.strip()):
            # A newly entered account starts with the role stored for it
            st.session_state["identity_role"] = session_role(get_backend(), user_id.strip(), current)
        role = st.selectbox("Role", roles, key="identity_role")
        if user_id.strip():
            st.session_state[SESSION_USER_KEY] = CurrentUser(id=user_id.strip(), role=role)
        else:
            st.session_state[SESSION_USER_KEY] = None
            st.caption("Browsing anonymously. Enter an account ID to book, save favorites or manage a profile.")


def _build_and_run_app():
    configure_logging()

    issues = validate_configuration()
    for component, issue in issues.items():
        logger.warning(f"Configuration issue ({component}): {issue}")
        st.sidebar.warning(f"⚠️ {component}: {issue}")

    render_identity_sidebar()

    nav_pages = [st.Page(path, title=title, icon=icon) for path, title, icon in _nav_items]
    pg = st.navigation(nav_pages)
    pg.run()


if __name__ == "__main__":
    _build_and_run_app()
