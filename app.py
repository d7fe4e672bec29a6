import logging
from urllib.parse import unquote

import streamlit as st

from domain.constants import API_BASE_URL, LOG_LEVEL
from services.auth import display_name

# Import the page rendering functions from the view modules
from views import (create_event, dashboard, event_detail, events, login,
                   organization_detail, organizations, profile, register,
                   settings)
from views.common import get_services

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# --- Page Registry ---
# Maps a page key to its label, rendering function, whether a login is needed
# and which account types may open it (None = everyone).
PAGE_REGISTRY = {
    "events": {
        "label": "🔎 Events",
        "render_func": events.view,
        "requires_auth": False,
        "user_types": None,
    },
    "event_detail": {
        "label": "📄 Event details",
        "render_func": event_detail.view,
        "requires_auth": False,
        "user_types": None,
    },
    "organizations": {
        "label": "🏢 Organizations",
        "render_func": organizations.view,
        "requires_auth": False,
        "user_types": None,
    },
    "organization_detail": {
        "label": "🏷️ Organization",
        "render_func": organization_detail.view,
        "requires_auth": False,
        "user_types": None,
    },
    "dashboard": {
        "label": "📊 Dashboard",
        "render_func": dashboard.view,
        "requires_auth": True,
        "user_types": None,
    },
    "create_event": {
        "label": "➕ Create event",
        "render_func": create_event.view,
        "requires_auth": True,
        "user_types": ["ORGANIZATION"],
    },
    "profile": {
        "label": "🙍 My profile",
        "render_func": profile.view,
        "requires_auth": True,
        "user_types": None,
    },
    "settings": {
        "label": "⚙️ Settings",
        "render_func": settings.view,
        "requires_auth": True,
        "user_types": None,
    },
    "login": {
        "label": "🔑 Log in",
        "render_func": login.view,
        "requires_auth": False,
        "user_types": None,
    },
    "register": {
        "label": "📝 Sign up",
        "render_func": register.view,
        "requires_auth": False,
        "user_types": None,
    },
}


def visible_pages(user):
    """Pages the sidebar should offer for ``user`` (None when logged out)."""
    pages = {}
    for key, page in PAGE_REGISTRY.items():
        if page["requires_auth"] and user is None:
            continue
        if page["user_types"] and (user is None or user.get("userType") not in page["user_types"]):
            continue
        if user is not None and key in ("login", "register"):
            continue
        pages[key] = page
    return pages


def main():
    """
    Main application router.

    This function controls the sidebar navigation and renders the selected page.
    Pages needing a login or a specific account type are hidden until they apply.
    """
    st.set_page_config(page_title="VolunteerSync", layout="wide")

    services = get_services()
    user = services.auth.current_user() if services.auth.is_logged_in() else None

    # --- Sidebar ---
    st.sidebar.title("VolunteerSync")
    if user:
        st.sidebar.caption(f"Signed in as {display_name(user)}")
        if st.sidebar.button("Log out"):
            services.auth.logout()
            st.session_state.nav_target = "events"
            st.rerun()

    pages = visible_pages(user)
    page_keys = list(pages.keys())
    page_labels = [v["label"] for v in pages.values()]

    # Query param persistence
    qs = st.query_params
    if 'nav_target' in st.session_state:
        target = st.session_state.nav_target
        if target in pages:
            st.session_state.navigation_radio = pages[target]["label"]
            st.query_params['page'] = target
        del st.session_state.nav_target
    elif 'page' in qs and 'navigation_radio' not in st.session_state:
        raw_param = qs.get('page')
        raw = unquote(raw_param) if isinstance(raw_param, str) else ''
        if raw in pages:
            st.session_state.navigation_radio = pages[raw]["label"]

    if st.session_state.get('navigation_radio') not in page_labels:
        st.session_state.navigation_radio = page_labels[0]

    selected_page_label = st.sidebar.radio(
        "Go to",
        page_labels,
        key="navigation_radio"
    )
    selected_page_key = page_keys[page_labels.index(selected_page_label)]
    st.query_params['page'] = selected_page_key

    # --- Page Rendering ---
    pages[selected_page_key]["render_func"]()

    # --- Footer ---
    st.sidebar.markdown("---")
    st.sidebar.caption(f"API: {API_BASE_URL}")


if __name__ == "__main__":
    main()
