"""Shared plumbing for the page modules: service wiring, auth guards, navigation."""
import logging
from typing import Iterable, Optional

import streamlit as st

from domain.constants import REMEMBER_SESSION
from services.account_settings import AccountSettingsService
from services.api import ApiClient
from services.auth import AuthService
from services.dashboard import DashboardService
from services.event_manager import EventManagerService
from services.events import FindEventService
from services.follows import FollowService
from services.organizations import FindOrganizationService
from services.profiles import ProfileService
from services.session import FileSessionStore, SessionStore

logger = logging.getLogger(__name__)


class Services:
    """Every service bound to one ApiClient (and therefore one session)."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.auth = AuthService(client)
        self.events = FindEventService(client)
        self.organizations = FindOrganizationService(client)
        self.event_manager = EventManagerService(client, self.auth)
        self.profiles = ProfileService(client)
        self.settings = AccountSettingsService(client)
        self.dashboard = DashboardService(client)
        self.follows = FollowService(client)


def get_services() -> Services:
    """Services for this browser session, created on first use."""
    if 'services' not in st.session_state:
        if REMEMBER_SESSION:
            session = FileSessionStore()
        else:
            session = SessionStore(st.session_state)
        logger.info("Creating API client (remember session: %s)", REMEMBER_SESSION)
        st.session_state.services = Services(ApiClient(session=session))
    return st.session_state.services


def navigate(page_key: str, **state):
    """Switch to another page on the next rerun, stashing any page state first."""
    for key, value in state.items():
        st.session_state[key] = value
    st.session_state.nav_target = page_key
    st.rerun()


def require_login(user_types: Optional[Iterable[str]] = None):
    """Return the current user, or render a hint and return None."""
    services = get_services()
    user = services.auth.current_user()
    if not services.auth.is_logged_in() or not user:
        st.info("Please log in to continue.")
        if st.button("Go to login", key="require_login_btn"):
            navigate("login")
        return None
    if user_types and user.get('userType') not in set(user_types):
        st.warning("This page is not available for your account type.")
        return None
    return user
