"""
Streamlit pages - public booking page and the owner's back office.
"""

import datetime
import logging

import streamlit as st

from .booking import book_table, change_status, list_reservations
from .capacity import remaining_seats
from .chatbot import ask_chatbot
from .config import LOG_LEVEL, MAX_GUESTS, MIN_GUESTS
from .db import init_db, seed_demo_restaurant_if_empty
from .errors import TableLinkError
from .reservations import count_by_status
from .restaurants import (
    add_gallery_photo,
    add_menu_item,
    average_rating,
    booking_link,
    create_restaurant,
    delete_menu_item,
    get_active_restaurant,
    get_restaurant_for_owner,
    list_menu_items,
    list_reviews,
    remove_gallery_photo,
    update_restaurant,
)

logger = logging.getLogger(__name__)

STATUS_LABELS = {"pending": "🟡 Pending", "confirmed": "🟢 Confirmed", "cancelled": "⚪ Cancelled"}


def _show_error(e: TableLinkError) -> None:
    st.error(e.user_message)


def booking_page(conn, restaurant_id: str) -> None:
    restaurant = get_active_restaurant(conn, restaurant_id)
    if restaurant is None:
        st.warning("The restaurant you're looking for doesn't exist or isn't available.")
        return

    if restaurant.logo_url:
        st.image(restaurant.logo_url, width=96)
    st.title(restaurant.name)
    if restaurant.description:
        st.caption(restaurant.description)
    st.markdown(f"📍 {restaurant.address}, {restaurant.city}  \n📞 {restaurant.phone}")

    if restaurant.gallery_photos:
        st.image(restaurant.gallery_photos[:4], width=180)

    st.subheader("Make a reservation")
    with st.form("booking", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Full name *")
            email = st.text_input("Email *")
            phone = st.text_input("Phone *")
        with col2:
            date = st.date_input("Date *", min_value=datetime.date.today())
            time = st.time_input("Time *", value=datetime.time(19, 0), step=900)
            guests = st.number_input("Guests *", min_value=MIN_GUESTS, max_value=MAX_GUESTS, value=2)
        requests_text = st.text_area("Special requests")
        submitted = st.form_submit_button("Book table")

    if submitted:
        result = book_table(conn, {
            "restaurant_id": restaurant.id,
            "customer_name": name,
            "customer_email": email,
            "customer_phone": phone,
            "reservation_date": date,
            "reservation_time": time,
            "number_of_guests": guests,
            "special_requests": requests_text,
        })
        if result.success:
            st.success(result.data["message"])
        else:
            st.error(result.error)

    if restaurant.max_capacity is not None:
        try:
            seats = remaining_seats(conn, restaurant.id, date.isoformat(), time.strftime("%H:%M"))
            st.caption(f"{seats} seats left on {date:%d %b} at {time:%H:%M}")
        except TableLinkError as e:
            logger.warning("Could not show remaining seats: %s", e)

    st.subheader("Reviews")
    reviews = list_reviews(conn, restaurant.id)
    if not reviews:
        st.info("No reviews for this restaurant yet.")
    else:
        st.markdown(f"⭐ {average_rating(conn, restaurant.id)} from {len(reviews)} reviews")
        for review in reviews:
            st.markdown(f"**{review.customer_name}** {'⭐' * review.rating}  \n{review.comment or ''}")

    st.subheader("Questions about the menu?")
    question = st.chat_input("Ask our assistant...")
    if question:
        with st.chat_message("user"):
            st.markdown(question)
        with st.spinner(""):
            answer = ask_chatbot(conn, restaurant.id, question)
        with st.chat_message("assistant"):
            if answer.success:
                st.markdown(answer.data["reply"])
            else:
                st.warning(answer.error)


def setup_page(conn, owner_id: str) -> None:
    st.title("Set up your restaurant")
    with st.form("setup"):
        name = st.text_input("Restaurant name *")
        description = st.text_area("Description")
        address = st.text_input("Address *")
        city = st.text_input("City *")
        phone = st.text_input("Phone *")
        email = st.text_input("Email")
        cuisine = st.text_input("Cuisine type")
        price_range = st.selectbox("Price range", ["$", "$$", "$$$", "$$$$"], index=1)
        capacity = st.number_input("Max guests per time slot (0 = no limit)", min_value=0, value=0)
        submitted = st.form_submit_button("Create restaurant")

    if submitted:
        try:
            create_restaurant(
                conn, owner_id, name=name, description=description, address=address, city=city,
                phone=phone, email=email, cuisine_type=cuisine, price_range=price_range,
                max_capacity=int(capacity) or None,
            )
        except TableLinkError as e:
            _show_error(e)
        else:
            st.success("Restaurant created!")
            st.rerun()


def dashboard_page(conn, restaurant) -> None:
    st.title(restaurant.name)
    st.text_input("Your booking link", booking_link(restaurant.id), disabled=True)

    counts = count_by_status(conn, restaurant.id)
    cols = st.columns(3)
    for col, status in zip(cols, ("pending", "confirmed", "cancelled")):
        col.metric(status.capitalize(), counts[status])

    st.subheader("Reservations")
    reservations = list_reservations(conn, restaurant.id)
    if not reservations:
        st.info("No reservations yet. Share your booking link!")
    for reservation in reservations:
        with st.container(border=True):
            st.markdown(
                f"**{reservation.customer_name}** · {reservation.number_of_guests} guests · "
                f"{reservation.reservation_date} {reservation.reservation_time} · "
                f"{STATUS_LABELS[reservation.status.value]}  \n"
                f"{reservation.customer_email} · {reservation.customer_phone}"
            )
            if reservation.special_requests:
                st.caption(reservation.special_requests)
            col1, col2 = st.columns(2)
            for col, status, label in ((col1, "confirmed", "Confirm"), (col2, "cancelled", "Cancel")):
                if col.button(label, key=f"{status}-{reservation.id}"):
                    result = change_status(conn, reservation.id, status, restaurant_id=restaurant.id)
                    if result.success:
                        st.rerun()
                    st.error(result.error)


def menu_page(conn, restaurant) -> None:
    st.title("Menu & FAQ")
    with st.form("info"):
        menu_description = st.text_area("Menu description", restaurant.menu_description or "")
        faq_info = st.text_area("Frequently asked questions", restaurant.faq_info or "")
        additional_info = st.text_area("Additional information", restaurant.additional_info or "")
        if st.form_submit_button("Save"):
            update_restaurant(conn, restaurant.id, menu_description=menu_description,
                              faq_info=faq_info, additional_info=additional_info)
            st.success("Information updated")

    st.subheader("Dishes")
    with st.form("dish", clear_on_submit=True):
        name = st.text_input("Name *")
        category = st.text_input("Category *")
        price = st.number_input("Price *", min_value=0.0, step=0.5)
        description = st.text_input("Description")
        if st.form_submit_button("Add dish"):
            try:
                add_menu_item(conn, restaurant.id, name, price, category, description)
            except TableLinkError as e:
                _show_error(e)

    for item in list_menu_items(conn, restaurant.id):
        col1, col2 = st.columns([5, 1])
        col1.markdown(f"**{item.name}** · {item.category} · €{item.price:.2f}")
        if col2.button("🗑️", key=f"del-{item.id}"):
            delete_menu_item(conn, item.id, restaurant_id=restaurant.id)
            st.rerun()


def settings_page(conn, restaurant) -> None:
    st.title("Settings")
    with st.form("branding"):
        logo_url = st.text_input("Logo URL", restaurant.logo_url or "")
        primary = st.color_picker("Primary color", restaurant.primary_color or "#E4572E")
        secondary = st.color_picker("Secondary color", restaurant.secondary_color or "#29335C")
        capacity = st.number_input("Max guests per time slot (0 = no limit)", min_value=0,
                                   value=restaurant.max_capacity or 0)
        if st.form_submit_button("Save"):
            try:
                update_restaurant(conn, restaurant.id, logo_url=logo_url, primary_color=primary,
                                  secondary_color=secondary, max_capacity=int(capacity) or None)
            except TableLinkError as e:
                _show_error(e)
            else:
                st.success("Settings saved")

    st.subheader("Gallery")
    new_photo = st.text_input("Photo URL")
    if st.button("Add photo"):
        try:
            add_gallery_photo(conn, restaurant.id, new_photo)
        except TableLinkError as e:
            _show_error(e)
        else:
            st.rerun()
    for index, url in enumerate(restaurant.gallery_photos):
        col1, col2 = st.columns([5, 1])
        col1.image(url, width=160)
        if col2.button("Remove", key=f"photo-{index}"):
            remove_gallery_photo(conn, restaurant.id, index)
            st.rerun()


def main():
    st.set_page_config(page_title="TableLink", page_icon="🍽️", layout="centered")
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    conn = init_db()
    seed_demo_restaurant_if_empty(conn)

    restaurant_id = st.query_params.get("restaurant")
    if restaurant_id:
        booking_page(conn, restaurant_id)
        return

    with st.sidebar:
        st.markdown("### 🍽️ TableLink")
        owner_id = st.text_input("Owner account", value="demo-owner")
        page = st.radio("Go to", ["Dashboard", "Menu & FAQ", "Settings", "Preview booking page"])

    restaurant = get_restaurant_for_owner(conn, owner_id)
    if restaurant is None:
        setup_page(conn, owner_id)
    elif page == "Dashboard":
        dashboard_page(conn, restaurant)
    elif page == "Menu & FAQ":
        menu_page(conn, restaurant)
    elif page == "Settings":
        settings_page(conn, restaurant)
    else:
        booking_page(conn, restaurant.id)


if __name__ == "__main__":
    main()
