import logging
import time

import streamlit as st

from domain.constants import (DATE_UPDATED_OPTIONS, ORGANIZATION_CATEGORIES,
                              ORGANIZATION_LOCATIONS, ORGANIZATION_SIZES,
                              SEARCH_DEBOUNCE_SECONDS)
from services import filters
from services.api import ApiError, error_message
from services.search_cache import Debouncer
from ui import components
from views.common import get_services, navigate

logger = logging.getLogger(__name__)


def _debouncer() -> Debouncer:
    if 'org_search_debouncer' not in st.session_state:
        st.session_state.org_search_debouncer = Debouncer(SEARCH_DEBOUNCE_SECONDS)
    return st.session_state.org_search_debouncer


def _sidebar_criteria(search_term: str) -> filters.OrganizationFilterCriteria:
    st.sidebar.subheader("Filter organizations")
    categories = st.sidebar.multiselect("Category", ORGANIZATION_CATEGORIES, key="orgf_categories")
    locations = st.sidebar.multiselect("Country", ORGANIZATION_LOCATIONS, key="orgf_locations")
    updated = st.sidebar.multiselect("Updated", list(DATE_UPDATED_OPTIONS), key="orgf_updated")
    sizes = st.sidebar.multiselect("Size", list(ORGANIZATION_SIZES), key="orgf_sizes")
    return filters.OrganizationFilterCriteria(search_term=search_term, categories=categories,
                                              locations=locations, date_updated=updated,
                                              sizes=sizes)


def _search(name: str, verified_only: bool, force: bool):
    services = get_services()
    search = services.organizations.realtime
    try:
        results = services.organizations.realtime_search(
            name=name, verified=True if verified_only else None, force_refresh=force)
    except ApiError as e:
        logger.warning("Organization search failed: %s", e)
        st.error(error_message(e, "Could not load organizations"))
        if st.button("Retry", key="org_retry"):
            search.invalidate()
            st.rerun()
        return None
    if search.last_error is not None:
        st.warning("Showing cached results; the server did not respond.")
    return results


def search_due(debouncer: Debouncer, query, force: bool = False, have_results: bool = True):
    """Record ``query`` and decide whether to hit the backend on this run.

    Returns ``(due, changed)``. A search is due once the query has settled,
    on refresh, or when nothing has been shown yet.
    """
    changed = debouncer.submit('query', query)
    due = force or not have_results or debouncer.ready('query')
    return due, changed


def view():
    st.header("Organizations")
    c1, c2, c3 = st.columns([5, 2, 1])
    name = c1.text_input("Search by name", key="org_search")
    verified_only = c2.checkbox("Verified only", key="org_verified")
    force = c3.button("↻", help="Refresh results")

    debouncer = _debouncer()
    name = (name or '').strip()
    results = st.session_state.get('org_results')
    due, changed = search_due(debouncer, (name, bool(verified_only)), force or False,
                              have_results=results is not None)
    if changed:
        st.session_state.org_page = 1
    if due:
        results = _search(name, verified_only, force or False)
        if results is None:
            return
        st.session_state.org_results = results
    else:
        st.caption("Searching…")

    criteria = _sidebar_criteria(name)
    # The name already narrowed the server-side search.
    criteria.search_term = ''
    matched = filters.filter_organizations(results, criteria)
    st.caption(f"{len(matched)} organizations")
    if not matched:
        st.info("No organizations match your search.")
    else:
        _render_results(matched)

    if not due:
        # Rerun once the input settles; a keystroke meanwhile restarts the script.
        time.sleep(debouncer.remaining('query'))
        st.rerun()


def _render_results(matched):
    per_page = 10
    total = filters.total_pages(len(matched), per_page)
    page = min(st.session_state.get('org_page', 1), total)
    for org in filters.paginate(matched, page, per_page):
        if components.organization_card(org):
            navigate("organization_detail", selected_organization_id=org.get('id'))
    if total > 1:
        cols = st.columns(2)
        if cols[0].button("Previous", disabled=page <= 1):
            st.session_state.org_page = page - 1
            st.rerun()
        if cols[1].button("Next", disabled=page >= total):
            st.session_state.org_page = page + 1
            st.rerun()
