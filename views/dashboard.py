import html

import streamlit as st

from services.auth import welcome_name
from ui import components
from views.common import get_services, navigate, require_login

VOLUNTEER_STATS = {
    'hoursCompleted': "Hours",
    'eventsAttended': "Events attended",
    'upcomingEvents': "Upcoming",
    'connections': "Connections",
    'rating': "Rating",
}

ORGANIZATION_STATS = {
    'activeEvents': "Active events",
    'totalEvents': "Total events",
    'eventsThisMonth': "This month",
    'pendingApplications': "Pending applications",
    'totalVolunteers': "Volunteers",
}


def _volunteer(data):
    components.stat_row(data['stats'], VOLUNTEER_STATS)
    st.subheader("My applications")
    frame = components.records_frame(data['applications'],
                                     ['event.title', 'event.eventDate', 'status'])
    frame.columns = ['Event', 'Date', 'Status']
    components.dataframe_with_status(frame, 'Status', "You haven't applied to any events yet.")
    if data['badges']:
        st.subheader("Badges")
        st.markdown(components.tag_badges(b.get('name') for b in data['badges']),
                    unsafe_allow_html=True)
    if data['recentActivity']:
        st.subheader("Recent activity")
        for item in data['recentActivity'][:10]:
            st.write(f"- {item.get('description') or item.get('type') or item}")


def _organization(data):
    services = get_services()
    components.stat_row(data['stats'], ORGANIZATION_STATS)
    st.subheader("My events")
    if not data['events']:
        st.caption("No events yet.")
        if st.button("Create your first event"):
            navigate("create_event")
    for event in data['events']:
        with st.container(border=True):
            c1, c2, c3, c4 = st.columns([4, 1, 1, 1])
            title = html.escape(str(event.get('title') or ''))
            c1.markdown(f"**{title}** " + components.status_badge(event.get('status') or ''),
                        unsafe_allow_html=True)
            event_id = event.get('id')
            actions = (
                (c2, "Publish", services.event_manager.publish_event),
                (c3, "Complete", services.event_manager.complete_event),
                (c4, "Cancel", services.event_manager.cancel_event),
            )
            for col, label, action in actions:
                if col.button(label, key=f"{label}_{event_id}"):
                    if components.show_result(action(event_id)):
                        st.rerun()

    st.subheader("Applications")
    frame = components.records_frame(data['applications'],
                                     ['volunteerName', 'event.title', 'status'])
    frame.columns = ['Volunteer', 'Event', 'Status']
    components.dataframe_with_status(frame, 'Status', "No applications yet.")


def view():
    user = require_login()
    if user is None:
        return
    services = get_services()
    st.header(f"Welcome, {welcome_name(user)}")
    if st.button("Refresh"):
        result = services.dashboard.refresh_dashboard_data()
    else:
        result = services.dashboard.get_dashboard_data()
    if not result['success']:
        st.error(result['message'])
        return
    data = result['data']
    if data.get('error'):
        st.warning(data['error'])
    if data['userType'] == 'VOLUNTEER':
        _volunteer(data)
    else:
        _organization(data)
