import datetime as dt
import logging

import streamlit as st

from domain.constants import (DATE_OPTIONS, DURATION_OPTIONS,
                              EVENT_FILTER_LOCATIONS, EVENT_FILTER_TYPES,
                              EVENTS_PER_PAGE, SKILL_LEVEL_OPTIONS,
                              TIME_OPTIONS)
from services import filters
from services.api import ApiError, error_message
from ui import components
from views.common import get_services, navigate

logger = logging.getLogger(__name__)

FILTER_GROUPS = [
    ("event_types", "Event type", EVENT_FILTER_TYPES),
    ("locations", "Location", EVENT_FILTER_LOCATIONS),
    ("dates", "Date", DATE_OPTIONS),
    ("times", "Time", TIME_OPTIONS),
    ("durations", "Duration", DURATION_OPTIONS),
    ("skill_levels", "Skill level", SKILL_LEVEL_OPTIONS),
]


def _load_events(force: bool = False):
    if force or 'events_all' not in st.session_state:
        st.session_state.events_all = get_services().events.find_all_events()
    return st.session_state.events_all


def _clear_filters():
    # runs as a callback, before the widgets are rebuilt
    for group, _, options in FILTER_GROUPS:
        for o in options:
            st.session_state[f"evf_{group}_{o}"] = False
    st.session_state.evf_search = ""
    st.session_state.evf_location = ""
    st.session_state.events_page = 1


def _sidebar_criteria() -> filters.EventFilterCriteria:
    st.sidebar.subheader("Filter events")
    values = {}
    for group, label, options in FILTER_GROUPS:
        with st.sidebar.expander(label, expanded=False):
            values[group] = [o for o in options if st.checkbox(o, key=f"evf_{group}_{o}")]
    if "Custom Date Range" in values["dates"]:
        today = dt.date.today()
        values["custom_start"] = st.sidebar.date_input("From", value=today, key="evf_custom_start")
        values["custom_end"] = st.sidebar.date_input("To", value=today + dt.timedelta(days=30),
                                                     key="evf_custom_end")
    st.sidebar.button("Clear all filters", on_click=_clear_filters)
    return filters.EventFilterCriteria(**values)


def _render_page_links(current: int, total: int):
    links = filters.page_numbers(current, total)
    cols = st.columns(len(links))
    for i, (col, item) in enumerate(zip(cols, links)):
        if item == '...':
            col.markdown("…")
        elif col.button(str(item), key=f"events_page_{i}_{item}", disabled=item == current):
            st.session_state.events_page = item
            st.rerun()


def _all_events_tab():
    c1, c2, c3 = st.columns([4, 3, 1])
    search = c1.text_input("Search events", key="evf_search")
    location = c2.text_input("City, state or ZIP", key="evf_location")
    if c3.button("↻", help="Reload events"):
        _load_events(force=True)

    criteria = _sidebar_criteria()
    criteria.search_term = search or ''
    criteria.location_search = location or ''

    events = _load_events()
    if not events:
        st.warning("No events could be loaded. The server may be unavailable.")
        if st.button("Try again"):
            _load_events(force=True)
            st.rerun()
        return

    now = dt.datetime.now()
    matched = filters.filter_events(events, criteria, now)
    st.caption(f"{len(matched)} of {len(events)} events")
    if not matched:
        st.info("No events match your filters.")
        return

    total = filters.total_pages(len(matched), EVENTS_PER_PAGE)
    page = min(st.session_state.get('events_page', 1), total)
    for event in filters.paginate(matched, page, EVENTS_PER_PAGE):
        if components.event_card(event, now, key_prefix="all"):
            navigate("event_detail", selected_event_id=event.get('id'))
    if total > 1:
        _render_page_links(page, total)


def _new_organizations_tab():
    services = get_services()
    c1, c2 = st.columns([3, 1])
    days = c1.slider("Organizations created in the last (days)", 1, 90, 30, key="neworg_days")
    refresh = c2.button("Refresh", key="neworg_refresh")
    try:
        if refresh:
            events = services.events.refresh_events_from_new_organizations(organization_max_age=days)
        else:
            events = services.events.find_recent_events_from_new_organizations(organization_age_days=days)
    except ApiError as e:
        logger.warning("New-organization feed failed: %s", e)
        st.error(error_message(e, "Could not load events from new organizations"))
        return
    if not events:
        st.info("No events from new organizations yet.")
        return
    for event in events:
        if components.event_card(event, key_prefix="new"):
            navigate("event_detail", selected_event_id=event.get('id'))


def view():
    st.header("Find volunteer events")
    tab_all, tab_new = st.tabs(["All events", "From new organizations"])
    with tab_all:
        _all_events_tab()
    with tab_new:
        _new_organizations_tab()
