import streamlit as st

from domain.models import user_from_dict, volunteer_profile_from_dict
from services.auth import display_name
from services.profiles import check_profile_completeness
from ui import components
from ui.components import profile_form
from views.common import get_services, navigate, require_login


def view():
    user = require_login()
    if user is None:
        return
    services = get_services()
    account = user_from_dict(user)
    user_type = account.userType

    fetched = services.profiles.fetch_my_profile()
    profile = fetched['data'] if fetched['success'] and isinstance(fetched['data'], dict) else user
    complete = check_profile_completeness(profile, user_type)

    if not complete:
        st.header("Complete your profile")
        st.caption("A complete profile helps organizations and volunteers find you.")
        data = profile_form.render(profile, user_type, key_prefix="setup", is_new=True)
        if data:
            result = services.profiles.create_or_update_profile(data)
            if components.show_result(result, "Profile saved"):
                navigate("dashboard")
        return

    st.header(display_name(user))
    stats = services.profiles.fetch_profile_stats()
    if stats['success'] and isinstance(stats['data'], dict):
        components.stat_row(stats['data'], {k: k for k in list(stats['data'])[:4]})
    elif not account.is_organization:
        summary = volunteer_profile_from_dict(profile)
        components.stat_row({"hours": summary.totalVolunteerHours, "events": summary.eventsParticipated},
                            {"hours": "Volunteer hours", "events": "Events joined"})

    data = profile_form.render(profile, user_type, key_prefix=f"edit_{user.get('id')}")
    if data and components.show_result(services.profiles.update_profile(data)):
        st.rerun()

    upload = st.file_uploader("Profile image", type=["png", "jpg", "jpeg"])
    if upload is not None and st.button("Upload image"):
        result = services.profiles.upload_profile_image(upload.name, upload.getvalue(),
                                                        content_type=upload.type or 'image/jpeg')
        components.show_result(result)

    if not account.is_organization:
        c1, c2 = st.columns(2)
        with c1.form("add_interest"):
            interest = st.text_input("Add an interest")
            if st.form_submit_button("Add") and interest:
                components.show_result(services.profiles.add_interest(interest))
        with c2.form("add_skill"):
            skill = st.text_input("Add a skill")
            if st.form_submit_button("Add") and skill:
                components.show_result(services.profiles.add_skill(skill))
