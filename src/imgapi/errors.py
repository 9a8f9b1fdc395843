"""Exceptions raised by imgapi."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "DecodeError",
    "ImgapiError",
    "InvalidIdentifierError",
    "TransportError",
    "UrlConstructionError",
    "ValidationError",
]


class ImgapiError(Exception):
    """Base class for every error raised by this package."""

    pass


class ValidationError(ImgapiError, ValueError):
    """Caller-supplied input was rejected before any request was sent."""

    pass


class InvalidIdentifierError(ValidationError):
    """An image identifier is not a valid UUID."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"{identifier!r} is not a valid image UUID")
        self.identifier = identifier


class UrlConstructionError(ImgapiError):
    """The request URL could not be built, usually a bad base endpoint."""

    pass


class TransportError(ImgapiError):
    """
    The request did not complete.

    ``status_code`` holds the HTTP status when the server answered with a
    non-success response, and is ``None`` for connection-level failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(ImgapiError):
    """The response body is not JSON or does not match the image schema."""

    pass
