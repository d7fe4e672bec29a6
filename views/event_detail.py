import streamlit as st

from domain.models import event_from_dict
from services import filters
from services.api import ApiError, NotFoundError, error_message
from ui import components
from utils.formatting import (duration_display, event_type_display,
                              event_type_icon, format_event_date,
                              format_event_time, skill_level_display)
from views.common import get_services, navigate


def view():
    services = get_services()
    event_id = st.session_state.get('selected_event_id')
    if event_id is None:
        st.info("Pick an event from the events page first.")
        if st.button("Browse events"):
            navigate("events")
        return

    try:
        raw = services.events.find_event_by_id(event_id)
    except NotFoundError:
        st.error("Event not found")
        return
    except ApiError as e:
        st.error(error_message(e, "Failed to load event"))
        return
    event = event_from_dict(raw)

    components.inject_base_css()
    st.header(f"{event_type_icon(event.eventType)} {event.title or 'Event'}")
    if event.organizationName:
        st.caption(f"Hosted by {event.organizationName}")
    st.markdown(components.status_badge(filters.event_status(raw)), unsafe_allow_html=True)

    c1, c2, c3 = st.columns(3)
    c1.metric("Date", format_event_date(event.start) or "TBD")
    c2.metric("Starts", format_event_time(event.start) or "—")
    if event.maxVolunteers:
        c3.metric("Spots remaining", filters.spots_remaining(raw))

    st.write(event.description or "")
    details = {
        "Type": event_type_display(event.eventType),
        "Skill level": skill_level_display(event.skillLevelRequired),
        "Duration": duration_display(event.durationCategory) or filters.duration_text(raw),
        "Location": "Virtual" if event.isVirtual else (event.location or event.city or "—"),
        "Requirements": event.requirements or "None",
        "Contact": event.contactEmail or "—",
    }
    for label, value in details.items():
        st.markdown(f"**{label}:** {value}")

    user = services.auth.current_user()
    if not services.auth.is_logged_in():
        st.info("Log in to apply for this event.")
        return
    if user and user.get('userType') != 'VOLUNTEER':
        return

    with st.form("apply_form"):
        message = st.text_area("Message to the organizer (optional)")
        submitted = st.form_submit_button("Apply")
    if submitted:
        try:
            services.events.apply_to_event(event.id, message)
        except ApiError as e:
            st.error(error_message(e, "Failed to submit application"))
        else:
            st.success("Application submitted!")
