import datetime as dt
import html
from typing import Any, Dict, Optional

import streamlit as st

from .base import inject_base_css, status_badge, tag_badges
from services import filters
from utils.formatting import (event_type_display, event_type_icon,
                              format_event_date, format_event_time)


def event_card(event: Dict[str, Any], now: Optional[dt.datetime] = None, key_prefix: str = "event") -> bool:
    """
    Displays a single event with its date badge, tags and capacity.

    Returns True when the "View details" button was pressed.
    """
    inject_base_css()
    badge = filters.date_badge(event.get('startDate'), now)
    status = filters.event_status(event, now)
    with st.container(border=True):
        top = st.columns([5, 2])
        with top[0]:
            icon = event_type_icon(event.get('eventType'))
            st.markdown(f"#### {icon} {event.get('title') or 'Untitled event'}")
            if event.get('organizationName'):
                st.caption(event['organizationName'])
        with top[1]:
            st.markdown(tag_badges([badge]) + " " + status_badge(status), unsafe_allow_html=True)

        when = format_event_date(event.get('startDate'))
        time_text = format_event_time(event.get('startDate'))
        where = "Virtual" if event.get('isVirtual') else (event.get('location') or event.get('city') or '—')
        meta = html.escape(f"{when} {time_text}") + " &nbsp; 📍 " + html.escape(str(where))
        st.markdown(f"<div class='event-meta'>📅 {meta}</div>",
                    unsafe_allow_html=True)

        description = event.get('description') or ''
        if len(description) > 220:
            description = description[:217] + "..."
        st.write(description)

        st.markdown(tag_badges([event_type_display(event.get('eventType')),
                                filters.duration_text(event),
                                filters.skill_level_text(event)]), unsafe_allow_html=True)
        cols = st.columns([3, 1])
        if event.get('maxVolunteers'):
            cols[0].caption(f"{filters.spots_remaining(event)} spots remaining")
        return cols[1].button("View details", key=f"{key_prefix}_{event.get('id')}")


def organization_card(org: Dict[str, Any], key_prefix: str = "org") -> bool:
    """Compact organization summary; returns True when "View" was pressed."""
    inject_base_css()
    name = org.get('organizationName') or org.get('name') or 'Organization'
    with st.container(border=True):
        c1, c2 = st.columns([5, 1])
        with c1:
            title = f"**{name}**"
            if org.get('isVerified'):
                title += " ✅"
            st.markdown(title)
            place = ", ".join(p for p in (org.get('city'), org.get('country')) if p)
            if place:
                st.caption(f"📍 {place}")
            summary = org.get('description') or org.get('missionStatement') or ''
            if summary:
                st.write(summary[:200] + ("..." if len(summary) > 200 else ""))
            if org.get('primaryCategory'):
                st.markdown(tag_badges([org['primaryCategory']]), unsafe_allow_html=True)
        with c2:
            if org.get('employeeCount'):
                st.metric("Staff", org['employeeCount'])
            return st.button("View", key=f"{key_prefix}_{org.get('id')}")


def stat_row(stats: Dict[str, Any], labels: Dict[str, str]):
    """One st.metric per label, in the order given."""
    cols = st.columns(len(labels))
    for col, (key, label) in zip(cols, labels.items()):
        col.metric(label, stats.get(key, 0))
