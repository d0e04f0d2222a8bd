"""
Error types raised by the booking core and the chatbot client.

Every error carries a ``user_message`` that the UI boundary can show as-is.
"""

from typing import Optional


class TableLinkError(Exception):
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message


class ValidationError(TableLinkError):
    """Bad customer input. The offending field is kept on ``field``."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}", user_message=message)
        self.field = field


class CapacityCheckError(TableLinkError):
    user_message = "We couldn't check availability right now. Please try again."


class CapacityExceededError(TableLinkError):
    user_message = "Sorry, there isn't enough room left at that time. Please pick another time."


class PersistenceError(TableLinkError):
    user_message = "We couldn't save your reservation. Please try again."


class InvalidTransitionError(TableLinkError):
    def __init__(self, current: str, new: str):
        super().__init__(
            f"Cannot change reservation status from {current} to {new}",
            user_message=f"A {current} reservation can't be marked as {new}.",
        )
        self.current = current
        self.new = new


class NotFoundError(TableLinkError):
    user_message = "We couldn't find that."


class ChatbotError(TableLinkError):
    user_message = "The assistant couldn't answer right now."


class RateLimitedError(ChatbotError):
    user_message = "Usage limit reached. Please try again later."


class PaymentRequiredError(ChatbotError):
    user_message = "The assistant is temporarily unavailable."
