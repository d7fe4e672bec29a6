import streamlit as st

from domain.models import organization_from_dict
from services.api import ApiError, error_message
from ui import components
from views.common import get_services, navigate


def _follow_controls(org_id):
    services = get_services()
    status = services.follows.follow_status(org_id)
    following = status.get('isFollowing', False)
    label = "Unfollow" if following else "Follow"
    if st.button(label, key="follow_toggle"):
        if following:
            result = services.follows.unfollow_organization(org_id)
        else:
            result = services.follows.follow_organization(org_id)
        if components.show_result(result):
            st.rerun()


def view():
    services = get_services()
    org_id = st.session_state.get('selected_organization_id')
    if org_id is None:
        st.info("Pick an organization from the organizations page first.")
        if st.button("Browse organizations"):
            navigate("organizations")
        return

    try:
        raw = services.organizations.find_organization_by_id(org_id)
    except ApiError as e:
        st.error(error_message(e, "Failed to load organization"))
        return
    if raw is None:
        st.error("Organization not found")
        return
    org = organization_from_dict(raw)

    st.header((org.organizationName or 'Organization') + (" ✅" if org.isVerified else ""))
    place = ", ".join(p for p in (org.city, org.state, org.country) if p)
    if place:
        st.caption(f"📍 {place}")

    count = services.follows.follower_count(org_id)
    c1, c2, c3 = st.columns(3)
    c1.metric("Followers", count.get('followerCount', 0))
    c2.metric("Events hosted", org.totalEventsHosted or 0)
    c3.metric("Volunteers served", org.totalVolunteersServed or 0)

    if org.missionStatement:
        st.subheader("Mission")
        st.write(org.missionStatement)
    st.write(org.description or "")
    if org.website:
        st.markdown(f"[Website]({org.website})")

    user = services.auth.current_user()
    if user and user.get('userType') == 'VOLUNTEER':
        _follow_controls(org_id)

    st.subheader("Upcoming events")
    try:
        events = services.events.find_events_by_organization(org_id)
    except ApiError as e:
        st.warning(error_message(e, "Could not load this organization's events"))
        return
    if not events:
        st.caption("No events posted yet.")
    for event in events:
        if components.event_card(event, key_prefix="org_event"):
            navigate("event_detail", selected_event_id=event.get('id'))
