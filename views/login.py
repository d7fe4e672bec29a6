import streamlit as st

from services.auth import is_profile_complete, welcome_name
from views.common import get_services, navigate


def view():
    st.header("Log in")
    services = get_services()

    if services.auth.is_logged_in():
        user = services.auth.current_user()
        st.success(f"Welcome back, {welcome_name(user)}!")
        if st.button("Log out"):
            services.auth.logout()
            st.rerun()
        return

    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in")

    if submitted:
        result = services.auth.login_user(email, password)
        if not result['success']:
            st.error(result['message'])
            return
        # Pull the full user record; the login body may only carry the basics.
        services.auth.get_user_profile()
        user = services.auth.current_user()
        st.success(f"Welcome, {welcome_name(user)}!")
        navigate("dashboard" if is_profile_complete(user) else "profile")

    st.caption("No account yet?")
    if st.button("Create an account"):
        navigate("register")
