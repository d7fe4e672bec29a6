import streamlit as st

from domain.constants import USER_TYPES
from views.common import get_services, navigate


def view():
    st.header("Create your account")
    services = get_services()

    user_type = st.radio("I am a", USER_TYPES, horizontal=True,
                         format_func=lambda t: t.title(), key="register_user_type")

    with st.form("register_form"):
        data = {'userType': user_type}
        if user_type == 'VOLUNTEER':
            c1, c2 = st.columns(2)
            data['firstName'] = c1.text_input("First name")
            data['lastName'] = c2.text_input("Last name")
        else:
            data['organizationName'] = st.text_input("Organization name")
        data['email'] = st.text_input("Email")
        data['password'] = st.text_input("Password", type="password")
        data['confirmPassword'] = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Sign up")

    if submitted:
        result = services.auth.register_user(data)
        if result['success']:
            st.success("Account created. Let's finish your profile.")
            navigate("profile")
        else:
            st.error(result['message'])
