"""
Monthly meal reviews — Streamlit UI entry point.
"""

import streamlit as st

# Load .env first so the backend choice and credentials are picked up
from monthly_reviews.utils.config import load_config, log_file, log_level
load_config()

from monthly_reviews.domains.errors import MonthReviewError
from monthly_reviews.services.factory import build_session
from monthly_reviews.utils.logger import setup_logger, get_logger
from monthly_reviews.ui.views import (
    render_admin_dashboard,
    render_food_display,
    render_login,
    render_month_header,
    render_review_form,
    render_review_list,
    report_error,
)

setup_logger(level=log_level(), log_file=log_file())
log = get_logger()

st.set_page_config(page_title="Monthly Experience Reviews", layout="wide")

# One store and auth gate per browser session
if "app_session" not in st.session_state:
    try:
        st.session_state.app_session = build_session()
    except (MonthReviewError, ValueError) as e:
        log.exception("Could not start session: %s", e)
        st.error(f"Could not load months and reviews: {e}")
        st.stop()

session = st.session_state.app_session
store = session.store
auth = session.auth

with st.sidebar:
    page = st.radio("Page", ["Reviews", "Admin"], label_visibility="collapsed")

    months = store.months
    if months:
        ids = [m.id for m in months]
        names = {m.id: m.name for m in months}
        current = store.active_month_id if store.active_month_id in ids else ids[0]
        chosen = st.selectbox("Month", ids, index=ids.index(current), format_func=names.get)
        if chosen != store.active_month_id:
            store.set_active_month_id(chosen)

    if st.button("Refresh", use_container_width=True):
        try:
            store.reload()
        except MonthReviewError as e:
            report_error(e)
        else:
            st.rerun()

    if auth.is_admin:
        st.caption(f"Signed in as **{auth.current_user().username}**")
        if st.button("Log out", use_container_width=True):
            auth.logout()
            st.rerun()

if page == "Admin":
    if auth.is_admin:
        render_admin_dashboard(store, auth)
    else:
        render_login(auth)
else:
    month = store.active_month
    if month is None:
        st.info("No months yet. An admin can add the first one.")
    else:
        render_month_header(month, store.month_summary(month.id))
        if month.status == "active":
            render_food_display(month)
            render_review_form(store)
        st.header("Community Thoughts")
        render_review_list(store.get_reviews_for_month(month.id))
