"""Streamlit UI helpers for months, the review form, the review list and the admin pages.

Rendering functions only call store/auth operations; every rule about what is
valid lives in the store. Errors are shown inline: validation problems as a
warning, backend failures as a generic try-again message.
"""

from __future__ import annotations

import base64
from typing import Any

import streamlit as st

from monthly_reviews.domains.errors import (
    AuthError,
    MonthReviewError,
    NotFoundError,
    ValidationError,
)
from monthly_reviews.domains.models import (
    MAX_REVIEW_IMAGES,
    MONTH_STATUSES,
    Month,
    Review,
    ReviewDraft,
    Specifics,
    parse_timestamp,
    sort_for_display,
)
from monthly_reviews.services.month_store import MonthStore, MonthSummary
from monthly_reviews.utils.logger import get_logger

logger = get_logger()

RETRY_MESSAGE = "Something went wrong while saving. Please try again."
STATUS_LABELS = {"upcoming": "🗓️ Upcoming", "active": "🍽️ Active", "closed": "🔒 Closed"}


def star_string(value: int | float | None, total: int = 5) -> str:
    """4 -> '★★★★☆'. Values are rounded and clamped to 0..total."""
    n = int(round(value or 0))
    n = max(0, min(total, n))
    return "★" * n + "☆" * (total - n)


def format_review_date(timestamp: str) -> str:
    """ISO timestamp -> 'Feb 03, 2026'; empty string when missing or unparseable."""
    if not timestamp:
        return ""
    dt = parse_timestamp(timestamp)
    if dt.year == 1:
        return ""
    return dt.strftime("%b %d, %Y")


def image_source(ref: str) -> str | bytes:
    """Inline data: references are decoded to bytes for st.image; URLs pass through."""
    if ref.startswith("data:") and ";base64," in ref:
        return base64.b64decode(ref.split(";base64,", 1)[1])
    return ref


def report_error(e: MonthReviewError) -> None:
    logger.info("Showing %s to user: %s", type(e).__name__, e)
    if isinstance(e, (ValidationError, NotFoundError)):
        st.warning(str(e))
    elif isinstance(e, AuthError):
        st.error(f"{e}. Please try again.")
    else:
        st.error(RETRY_MESSAGE)


# --- visitor pages ---

def render_month_header(month: Month, summary: MonthSummary | None = None) -> None:
    st.title(f"{month.name} Experience")
    st.caption("Made with a little bit of magic ♡")
    if month.status == "closed":
        st.info("Submissions Closed")
    if summary and summary.review_count:
        st.markdown(
            f"**{star_string(summary.average_rating)}** {summary.average_rating:.1f} "
            f"from {summary.review_count} review(s)"
        )


def render_food_display(month: Month) -> None:
    if month.images:
        st.image(image_source(month.images[0]), use_container_width=True)
        if len(month.images) > 1:
            cols = st.columns(min(len(month.images) - 1, 4))
            for i, ref in enumerate(month.images[1:]):
                with cols[i % len(cols)]:
                    st.image(image_source(ref), use_container_width=True)
    if month.description:
        st.markdown(month.description)
    else:
        st.caption("The menu for this month will be revealed soon.")


def _rating_input(label: str, key: str, minimum: int = 0) -> int:
    return st.select_slider(
        label,
        options=list(range(minimum, 6)),
        value=minimum,
        format_func=lambda v: star_string(v) if v else "Not rated",
        key=key,
    )


def render_review_form(store: MonthStore) -> None:
    st.subheader("Month Experience Review")
    with st.form("review_form", clear_on_submit=True):
        nickname = st.text_input("Your Nickname (Optional)", placeholder="e.g. FoodieKing or SecretChef")
        rating = _rating_input("Overall Rating", key="rating_overall")
        st.markdown("**Rate the Specifics**")
        taste = _rating_input("Taste", key="rating_taste")
        portion = _rating_input("Portion Size", key="rating_portion")
        presentation = _rating_input("Presentation", key="rating_presentation")
        love = st.text_area("What did you love most?", placeholder="The dessert was amazing...")
        improve = st.text_area("What can be improved?", placeholder="Maybe less salt...")
        files = st.file_uploader(
            f"Snap & Send (max {MAX_REVIEW_IMAGES})",
            type=["png", "jpg", "jpeg", "gif", "webp"],
            accept_multiple_files=True,
        )
        submitted = st.form_submit_button("Submit Review", use_container_width=True)

    if not submitted:
        return

    draft = ReviewDraft(
        rating=rating,
        specifics=Specifics(taste=taste, portion=portion, presentation=presentation),
        nickname=nickname,
        love=love,
        improve=improve,
    )
    files = files or []
    try:
        draft.validate()
        if len(files) > MAX_REVIEW_IMAGES:
            raise ValidationError(f"Maximum {MAX_REVIEW_IMAGES} images allowed.")
        with st.spinner("Sending your review…"):
            draft.images = [store.upload_image(f.name, f.getvalue(), f.type) for f in files]
            store.add_review(draft)
    except MonthReviewError as e:
        report_error(e)
        return
    st.success("Thank you! ✨ Your feedback helps make the next meal even better.")


def render_review_card(review: Review, month_name: str | None = None) -> None:
    with st.container(border=True):
        head = f"**{review.nickname}**"
        if review.is_featured:
            head = "⭐ Featured · " + head
        st.markdown(head)
        meta = format_review_date(review.timestamp)
        if month_name:
            meta = f"{month_name} · {meta}" if meta else month_name
        if meta:
            st.caption(meta)
        st.markdown(star_string(review.rating))
        s = review.specifics
        st.caption(
            f"Taste {star_string(s.taste)} · Portion {star_string(s.portion)} · "
            f"Presentation {star_string(s.presentation)}"
        )
        if review.love:
            st.markdown(f"**Loved Most:** _\"{review.love}\"_")
        if review.improve:
            st.markdown(f"**Could Improve:** {review.improve}")
        if review.images:
            cols = st.columns(MAX_REVIEW_IMAGES)
            for i, ref in enumerate(review.images):
                with cols[i % MAX_REVIEW_IMAGES]:
                    st.image(image_source(ref), use_container_width=True)


def render_review_list(reviews: list[Review]) -> None:
    if not reviews:
        st.info("No reviews yet... Be the first to sprinkle some magic! ✨")
        return
    for review in sort_for_display(reviews):
        render_review_card(review)


# --- admin pages ---

def render_login(auth: Any) -> None:
    st.subheader("Admin Login")
    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in")
    if not submitted:
        return
    try:
        ok = auth.login(username, password)
    except MonthReviewError as e:
        report_error(e)
        return
    if ok:
        st.rerun()
    st.error("Invalid username or password.")


def _render_month_admin(store: MonthStore, month: Month) -> None:
    with st.container(border=True):
        c1, c2, c3 = st.columns([3, 2, 1])
        with c1:
            st.markdown(f"**{month.name}** `{month.id}`")
            st.caption(STATUS_LABELS.get(month.status, month.status))
        with c2:
            status = st.selectbox(
                "Status",
                MONTH_STATUSES,
                index=MONTH_STATUSES.index(month.status) if month.status in MONTH_STATUSES else 0,
                key=f"status_{month.id}",
                label_visibility="collapsed",
            )
            if status != month.status:
                try:
                    store.update_month_status(month.id, status)
                except MonthReviewError as e:
                    report_error(e)
                else:
                    st.rerun()
        with c3:
            if st.button("View", key=f"view_{month.id}", disabled=month.id == store.active_month_id):
                store.set_active_month_id(month.id)
                st.rerun()

        with st.expander("Details"):
            with st.form(f"details_{month.id}"):
                description = st.text_area("Description", value=month.description)
                new_files = st.file_uploader(
                    "Add images",
                    type=["png", "jpg", "jpeg", "gif", "webp"],
                    accept_multiple_files=True,
                    key=f"images_{month.id}",
                )
                clear = st.checkbox("Remove existing images", key=f"clear_{month.id}")
                saved = st.form_submit_button("Save details")
            if saved:
                try:
                    images = [] if clear else list(month.images)
                    images += [store.upload_image(f.name, f.getvalue(), f.type) for f in new_files or []]
                    store.update_month_details(month.id, description=description, images=images)
                except MonthReviewError as e:
                    report_error(e)
                else:
                    st.rerun()


def _render_review_admin(store: MonthStore, review: Review, month_names: dict[str, str]) -> None:
    render_review_card(review, month_name=month_names.get(review.month_id, review.month_id))
    c1, c2 = st.columns(2)
    with c1:
        label = "Unfeature" if review.is_featured else "Feature"
        if st.button(label, key=f"feature_{review.id}", use_container_width=True):
            try:
                store.toggle_featured_review(review.id)
            except MonthReviewError as e:
                report_error(e)
            else:
                st.rerun()
    with c2:
        if st.button("Delete", key=f"delete_{review.id}", use_container_width=True):
            try:
                store.delete_review(review.id)
            except MonthReviewError as e:
                report_error(e)
            else:
                st.rerun()


def render_credentials_form(auth: Any) -> None:
    with st.form("credentials_form"):
        username = st.text_input("New username", value=getattr(auth.current_user(), "username", ""))
        password = st.text_input("New password", type="password")
        saved = st.form_submit_button("Update credentials")
    if saved:
        try:
            auth.update_credentials(username, password)
        except MonthReviewError as e:
            report_error(e)
        else:
            st.success("Credentials updated.")


def render_admin_dashboard(store: MonthStore, auth: Any) -> None:
    st.title("👑 Admin Dashboard")
    left, right = st.columns(2)

    with left:
        st.subheader("Monthly Experience Management")
        with st.form("add_month_form", clear_on_submit=True):
            name = st.text_input("New Month Name", placeholder="e.g. March 2026")
            added = st.form_submit_button("Add month")
        if added:
            try:
                store.add_month(name)
            except MonthReviewError as e:
                report_error(e)
            else:
                st.rerun()
        active = [m for m in store.months if m.status == "active"]
        if len(active) > 1:
            st.warning("More than one month is active: " + ", ".join(m.name for m in active))
        for month in store.months:
            _render_month_admin(store, month)

    with right:
        reviews = store.all_reviews_newest_first()
        st.subheader(f"All Reviews ({len(reviews)})")
        month_names = {m.id: m.name for m in store.months}
        if not reviews:
            st.caption("No reviews yet.")
        for review in reviews:
            _render_review_admin(store, review, month_names)

    with st.expander("Admin settings"):
        render_credentials_form(auth)
