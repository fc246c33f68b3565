"""Request handling helpers for the callback server."""

from momo_callbacks.server.middleware.validation import BodySizeValidator

__all__ = ["BodySizeValidator"]
