"""Request body size enforcement.

Webhook bodies are read in full before classification, so the limit is
enforced while reading rather than only trusting ``Content-Length``: a
chunked or lying client is cut off as soon as it crosses the limit.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from momo_callbacks.server.errors import (
    BodyTooLargeError,
    CallbackErrorCode,
    create_error_response,
    get_callback_error_status,
)
from momo_callbacks.server.models import RequestTooLargeResponse

logger = logging.getLogger(__name__)


class BodySizeValidator:
    """Reads request bodies with an upper bound.

    Example - Reading a webhook body:
        >>> validator = BodySizeValidator(max_body_size=1024 * 1024)  # 1MB
        >>>
        >>> @app.post("/hook")
        >>> async def hook(request: Request):
        ...     try:
        ...         body = await validator.read_body(request)
        ...     except BodyTooLargeError as e:
        ...         return validator.too_large_response(e)

    Example - Header-only check:
        >>> validator.check_size(request)  # Raises BodyTooLargeError
    """

    def __init__(self, max_body_size: int = 1024 * 1024):
        """Initialize body size validator.

        Args:
            max_body_size: Maximum request body size in bytes (default: 1MB)
        """
        self.max_body_size = max_body_size

        logger.info(
            f"BodySizeValidator initialized: max_body_size={max_body_size} bytes"
        )

    def check_size(self, request: Request) -> None:
        """Reject early when the declared Content-Length is over the limit.

        A missing or malformed header is let through; :meth:`read_body`
        still enforces the limit on the bytes actually received.

        Raises:
            BodyTooLargeError: Declared length exceeds the limit
        """
        content_length = request.headers.get("content-length")
        if not content_length:
            return
        try:
            declared = int(content_length)
        except ValueError:
            return  # Invalid Content-Length, counted while streaming instead
        if declared > self.max_body_size:
            raise BodyTooLargeError(self.max_body_size, declared)

    async def read_body(self, request: Request) -> bytes:
        """Read the full request body, stopping once the limit is exceeded.

        Args:
            request: FastAPI request object

        Returns:
            Body bytes (at most ``max_body_size`` long)

        Raises:
            BodyTooLargeError: Body exceeds the limit
            starlette.requests.ClientDisconnect: Client went away mid-body
        """
        self.check_size(request)

        chunks: list[bytes] = []
        received = 0
        async for chunk in request.stream():
            received += len(chunk)
            if received > self.max_body_size:
                raise BodyTooLargeError(self.max_body_size, received)
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    def too_large_response(error: BodyTooLargeError) -> JSONResponse:
        """Build the 413 response for an oversized body.

        Example:
            >>> BodySizeValidator.too_large_response(BodyTooLargeError(1024)).status_code
            413
        """
        code = CallbackErrorCode.BODY_TOO_LARGE
        return JSONResponse(
            status_code=get_callback_error_status(code),
            content=RequestTooLargeResponse(
                **create_error_response(
                    code,
                    message=str(error),
                    details={"limit": error.limit},
                )
            ).model_dump(),
        )
