"""
Restaurant chatbot - answers menu and FAQ questions through the AI gateway.
"""

import json
import logging
import sqlite3
from collections import defaultdict

import requests

from .config import AI_API_KEY, AI_GATEWAY_URL, LLM_MODEL, LLM_TIMEOUT
from .errors import ChatbotError, NotFoundError, PaymentRequiredError, RateLimitedError
from .models import MenuItem, Restaurant, ToolResult
from .restaurants import get_restaurant, list_menu_items

logger = logging.getLogger(__name__)


def build_restaurant_context(restaurant: Restaurant, menu_items: list[MenuItem]) -> str:
    """System prompt with the restaurant's details and available menu."""
    lines = [
        f'You are the virtual assistant for the restaurant "{restaurant.name}".',
        "",
        "Restaurant information:",
        f"- Name: {restaurant.name}",
        f"- Description: {restaurant.description or 'Not available'}",
        f"- Address: {restaurant.address}, {restaurant.city}",
        f"- Phone: {restaurant.phone}",
        f"- Email: {restaurant.email or 'Not available'}",
        f"- Cuisine: {restaurant.cuisine_type or 'Not specified'}",
        f"- Price range: {restaurant.price_range or 'Not specified'}",
    ]
    if restaurant.menu_description:
        lines.append(f"- Menu description: {restaurant.menu_description}")
    if restaurant.faq_info:
        lines.append(f"- Frequently asked questions: {restaurant.faq_info}")
    if restaurant.additional_info:
        lines.append(f"- Additional information: {restaurant.additional_info}")

    by_category = defaultdict(list)
    for item in menu_items:
        if item.is_available:
            by_category[item.category].append(item)
    if by_category:
        lines += ["", "Available menu:"]
        for category, items in by_category.items():
            lines += ["", f"{category}:"]
            for item in items:
                entry = f"- {item.name} (€{item.price:.2f})"
                if item.description:
                    entry += f": {item.description}"
                lines.append(entry)

    lines += [
        "",
        "Please answer customers' questions about the restaurant kindly and helpfully. "
        "If they ask about reservations, tell them they can book directly on this page.",
    ]
    return "\n".join(lines)


def complete(system_prompt: str, user_message: str) -> str:
    """Send one system + user exchange to the gateway and return the reply text."""
    if not AI_API_KEY:
        raise ChatbotError("AI_API_KEY not configured")

    payload = {
        "model": LLM_MODEL,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ],
    }
    headers = {
        "Authorization": f"Bearer {AI_API_KEY}",
        "Content-Type": "application/json",
    }
    try:
        resp = requests.post(AI_GATEWAY_URL, headers=headers, json=payload, timeout=LLM_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise ChatbotError(f"AI gateway request failed: {e}") from e

    if resp.status_code == 429:
        raise RateLimitedError("AI gateway rate limited the request")
    if resp.status_code == 402:
        raise PaymentRequiredError("AI gateway requires payment")
    if resp.status_code != 200:
        logger.error("AI gateway error %s: %s", resp.status_code, resp.text)
        raise ChatbotError(f"AI gateway error {resp.status_code}")

    try:
        return resp.json()["choices"][0]["message"]["content"] or ""
    except (json.JSONDecodeError, ValueError, KeyError, IndexError, TypeError) as e:
        raise ChatbotError(f"Unexpected AI gateway response format: {e}") from e


def ask_chatbot(conn: sqlite3.Connection, restaurant_id: str, message: str) -> ToolResult:
    """Answer a customer question. Never raises; failures come back as error text."""
    if not restaurant_id or not message or not message.strip():
        return ToolResult(success=False, data={}, error="Please type a question.")

    try:
        restaurant = get_restaurant(conn, restaurant_id)
        menu_items = list_menu_items(conn, restaurant_id, available_only=True)
        reply = complete(build_restaurant_context(restaurant, menu_items), message.strip())
    except (RateLimitedError, PaymentRequiredError) as e:
        logger.warning("Chatbot unavailable for %s: %s", restaurant_id, e)
        return ToolResult(success=False, data={"kind": type(e).__name__}, error=e.user_message)
    except (ChatbotError, NotFoundError) as e:
        logger.error("Chatbot error for %s: %s", restaurant_id, e)
        return ToolResult(success=False, data={"kind": type(e).__name__}, error=e.user_message)
    except sqlite3.Error as e:
        logger.error("Chatbot could not load restaurant %s: %s", restaurant_id, e)
        return ToolResult(success=False, data={}, error=ChatbotError.user_message)

    return ToolResult(success=True, data={"reply": reply})
