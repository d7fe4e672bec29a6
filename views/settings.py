import streamlit as st

from domain.constants import PROFILE_VISIBILITY_OPTIONS
from ui import components
from views.common import get_services, navigate, require_login


def _notifications(services):
    result = services.settings.fetch_notification_settings()
    if not result['success']:
        st.caption("Showing default notification settings.")
    current = result['data']
    with st.form("notification_settings"):
        updated = {key: st.toggle(key, value=bool(value)) for key, value in current.items()}
        if st.form_submit_button("Save notifications"):
            components.show_result(services.settings.update_notification_settings(updated))


def _privacy(services):
    result = services.settings.fetch_privacy_settings()
    if not result['success']:
        st.caption("Showing default privacy settings.")
    current = result['data']
    with st.form("privacy_settings"):
        updated = {}
        visibility = current.get('profileVisibility', 'public')
        idx = PROFILE_VISIBILITY_OPTIONS.index(visibility) if visibility in PROFILE_VISIBILITY_OPTIONS else 0
        updated['profileVisibility'] = st.selectbox("Profile visibility", PROFILE_VISIBILITY_OPTIONS, index=idx)
        for key, value in current.items():
            if key != 'profileVisibility':
                updated[key] = st.toggle(key, value=bool(value))
        if st.form_submit_button("Save privacy"):
            components.show_result(services.settings.update_privacy_settings(updated))


def _security(services):
    with st.form("change_password"):
        current = st.text_input("Current password", type="password")
        new = st.text_input("New password", type="password")
        confirm = st.text_input("Confirm new password", type="password")
        if st.form_submit_button("Change password"):
            components.show_result(services.settings.change_password(current, new, confirm))

    c1, c2 = st.columns(2)
    if c1.button("Enable two-factor authentication"):
        components.show_result(services.settings.enable_two_factor())
    with c2.form("disable_2fa"):
        password = st.text_input("Password", type="password", key="disable_2fa_pw")
        if st.form_submit_button("Disable two-factor"):
            components.show_result(services.settings.disable_two_factor(password))

    st.subheader("Active sessions")
    sessions = services.settings.fetch_active_sessions()
    if sessions['success'] and sessions['data']:
        for item in sessions['data']:
            s1, s2 = st.columns([4, 1])
            s1.write(f"{item.get('device') or 'Unknown device'} · {item.get('lastActive') or ''}")
            if not item.get('current') and s2.button("End", key=f"end_session_{item.get('id')}"):
                components.show_result(services.settings.terminate_session(item.get('id')))
        if st.button("Sign out all other sessions"):
            components.show_result(services.settings.terminate_all_other_sessions())
    else:
        st.caption(sessions.get('message') or "No other sessions.")


def _account(services):
    if st.button("Request data export"):
        components.show_result(services.settings.request_data_export())
    with st.expander("Delete account"):
        with st.form("delete_account"):
            password = st.text_input("Password", type="password", key="delete_pw")
            reason = st.text_area("Reason (optional)")
            confirmed = st.checkbox("I understand this cannot be undone")
            if st.form_submit_button("Delete my account") and confirmed:
                if components.show_result(services.settings.delete_account(password, reason)):
                    navigate("login")


def view():
    st.header("Settings")
    if require_login() is None:
        return
    services = get_services()
    tabs = st.tabs(["Notifications", "Privacy", "Security", "Account"])
    with tabs[0]:
        _notifications(services)
    with tabs[1]:
        _privacy(services)
    with tabs[2]:
        _security(services)
    with tabs[3]:
        _account(services)
