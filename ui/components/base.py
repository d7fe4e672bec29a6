import html

import streamlit as st

PRIMARY_ACCENT = "#2563EB"  # blue-600
GREEN = "#059669"  # emerald-600
YELLOW = "#D97706"  # amber-600
RED = "#DC2626"  # red-600
CHIP_BG = "#374151"

_STATUS_COLORS = {
    "active": "green",
    "verified": "green",
    "upcoming": "green",
    "approved": "green",
    "in progress": "yellow",
    "pending": "yellow",
    "draft": "yellow",
    "full": "red",
    "cancelled": "red",
    "rejected": "red",
}


def inject_base_css():
    if getattr(inject_base_css, "_applied", False):
        return
    inject_base_css._applied = True
    st.markdown(
        f"""
        <style>
        .badge {{
            display:inline-block; padding:2px 8px; border-radius:12px;
            font-size:12px; line-height:16px; font-weight:600;
            background:{CHIP_BG}; color:#F9FAFB; margin-right:4px; margin-bottom:4px;
        }}
        .badge.green {{background:{GREEN};}}
        .badge.yellow {{background:{YELLOW};}}
        .badge.red {{background:{RED};}}
        .badge.blue {{background:{PRIMARY_ACCENT};}}
        .event-meta {{color:#6B7280; font-size:13px;}}
        </style>
        """,
        unsafe_allow_html=True,
    )


def status_badge(status: str) -> str:
    cls = _STATUS_COLORS.get((status or "").lower(), "")
    return f'<span class="badge {cls}">{html.escape(str(status or ""))}</span>'


def tag_badges(tags) -> str:
    return " ".join(f'<span class="badge blue">{html.escape(str(t))}</span>' for t in tags if t)


def show_result(result, success_message: str = None) -> bool:
    """Render a service result dict with st.success / st.error; returns its success flag."""
    if result.get("success"):
        st.success(success_message or result.get("message") or "Done")
        return True
    st.error(result.get("message") or "Something went wrong")
    return False
