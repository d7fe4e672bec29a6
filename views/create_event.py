import datetime as dt

import streamlit as st

from domain.constants import (DURATION_CATEGORIES, EVENT_TYPES, SKILL_LEVELS)
from ui import components
from utils.formatting import (duration_display, event_type_display,
                              skill_level_display)
from views.common import get_services, require_login


def view():
    st.header("Create an event")
    user = require_login(user_types=["ORGANIZATION"])
    if user is None:
        return
    services = get_services()

    with st.form("create_event_form"):
        title = st.text_input("Title")
        description = st.text_area("Description")
        c1, c2, c3 = st.columns(3)
        event_type = c1.selectbox("Type", EVENT_TYPES, format_func=event_type_display)
        skill = c2.selectbox("Skill level", SKILL_LEVELS, format_func=skill_level_display)
        duration = c3.selectbox("Duration", DURATION_CATEGORIES, format_func=duration_display)

        d1, d2, d3, d4 = st.columns(4)
        start_day = d1.date_input("Start date", value=dt.date.today() + dt.timedelta(days=7))
        start_time = d2.time_input("Start time", value=dt.time(9, 0))
        end_day = d3.date_input("End date", value=dt.date.today() + dt.timedelta(days=7))
        end_time = d4.time_input("End time", value=dt.time(12, 0))

        is_virtual = st.checkbox("Virtual event")
        location = st.text_input("Location / venue")
        l1, l2, l3 = st.columns(3)
        city = l1.text_input("City")
        state = l2.text_input("State")
        zip_code = l3.text_input("ZIP")

        n1, n2 = st.columns(2)
        max_volunteers = n1.number_input("Max volunteers", min_value=0, value=10)
        hours = n2.number_input("Estimated hours", min_value=0, value=3)
        requirements = st.text_area("Requirements")
        flexible = st.checkbox("Flexible timing")
        submitted = st.form_submit_button("Create event")

    if not submitted:
        return
    event_data = {
        'title': title,
        'description': description,
        'eventType': event_type,
        'skillLevelRequired': skill,
        'durationCategory': duration,
        'startDate': dt.datetime.combine(start_day, start_time).isoformat(),
        'endDate': dt.datetime.combine(end_day, end_time).isoformat(),
        'isVirtual': is_virtual,
        'location': location,
        'city': city,
        'state': state,
        'zipCode': zip_code,
        'maxVolunteers': int(max_volunteers),
        'estimatedHours': int(hours),
        'requirements': requirements,
        'hasFlexibleTiming': flexible,
    }
    result = services.event_manager.create_event(event_data)
    if components.show_result(result):
        st.session_state.pop('events_all', None)
        services.events.realtime.invalidate()
