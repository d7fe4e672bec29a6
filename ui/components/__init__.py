"""
This package provides a collection of reusable UI components for the Streamlit application.

It is organized into several modules, each containing a specific category of components:
- `base`: Basic, general-purpose components like CSS injectors and status badges.
- `cards`: Event and organization cards plus metric rows.
- `profile_form`: The shared profile setup / edit form.

By importing the components here, we provide a single, consistent access point
for the rest of the application (`from ui import components`).
"""
import html
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import streamlit as st

from .base import (
    inject_base_css,
    show_result,
    status_badge,
    tag_badges,
)

from .cards import (
    event_card,
    organization_card,
    stat_row,
)

from . import profile_form


def records_frame(records: Iterable[Dict[str, Any]], columns: List[str]) -> pd.DataFrame:
    """Build a DataFrame with exactly ``columns``; nested dicts are flattened with dots."""
    frame = pd.json_normalize(list(records or []))
    for col in columns:
        if col not in frame.columns:
            frame[col] = None
    return frame[columns]


def status_table_html(df: pd.DataFrame, status_col: Optional[str] = None) -> str:
    """HTML table with escaped cells; ``status_col`` is rendered as badges."""
    df = df.copy()
    for col in df.columns:
        values = df[col].fillna('').astype(str)
        df[col] = values.apply(status_badge) if col == status_col else values.apply(html.escape)
    df.columns = [html.escape(str(c)) for c in df.columns]
    return df.to_html(escape=False, index=False)


def dataframe_with_status(df: pd.DataFrame, status_col: Optional[str] = None,
                          empty_message: str = "Nothing to show yet."):
    inject_base_css()
    if df is None or df.empty:
        st.caption(empty_message)
        return
    st.write(status_table_html(df, status_col), unsafe_allow_html=True)
