"""Core logic for imgapi."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urlsplit
from uuid import UUID

import pydantic
import requests

from .errors import (
    DecodeError,
    InvalidIdentifierError,
    TransportError,
    UrlConstructionError,
)
from .models import Image, ImageFilter
from .query import encode_filter

__all__ = [
    "DEFAULT_IMGAPI_URL",
    "CatalogClient",
    "get_image",
    "list_images",
]

logger = logging.getLogger(__name__)

DEFAULT_IMGAPI_URL = "https://images.joyent.com/images"

_IMAGE_LIST = pydantic.TypeAdapter(List[Image])


def _validate_base_url(url: str) -> str:
    """
    Return *url* unchanged if it can serve as the catalog endpoint.

    It must be an absolute http(s) URL with no query or fragment, since
    filters are appended as ``?<query>`` and image ids as a path segment.
    """
    try:
        parts = urlsplit(url)
        # accessing .port validates the port component
        _ = parts.port
    except ValueError as exc:
        raise UrlConstructionError(f"Malformed URL {url!r}: {exc}") from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise UrlConstructionError(
            f"Malformed URL {url!r}: expected an absolute http(s) URL."
        )
    if parts.query or parts.fragment:
        raise UrlConstructionError(
            f"Malformed URL {url!r}: base URL must not carry a query or fragment."
        )
    return url


class CatalogClient:
    """
    Read-only client for an IMGAPI image catalog.

    The client keeps no state between calls.  Connection pooling, TLS and
    proxy settings belong to the ``requests.Session`` it is given.  When
    none is passed the client creates its own and closes it in
    ``close()``, so use it as a context manager::

        with CatalogClient() as client:
            images = client.list(ImageFilter(os=OperatingSystem.LINUX))

    ``timeout`` is handed to ``requests`` as-is; ``None`` means no timeout.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_IMGAPI_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = _validate_base_url(base_url)
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def __enter__(self) -> CatalogClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the session if this client created it; injected ones are left open."""
        if self._owns_session:
            self.session.close()

    def list(self, image_filter: Optional[ImageFilter] = None) -> List[Image]:
        """
        List the images matching *image_filter*.

        The whole response must decode; one malformed element fails the
        call.
        """
        url = self.base_url
        if image_filter is not None:
            query = encode_filter(image_filter)
            if query:
                url = f"{self.base_url}?{query}"

        body = self._fetch(url)
        try:
            return _IMAGE_LIST.validate_json(body)
        except pydantic.ValidationError as exc:
            logger.warning("Undecodable image list from %s", url)
            raise DecodeError(f"Invalid image list from {url}: {exc}") from exc

    def get(self, image_uuid: str) -> Image:
        """Fetch a single image by UUID; the id is checked before any request."""
        try:
            uuid = UUID(image_uuid)
        except (TypeError, ValueError, AttributeError) as exc:
            raise InvalidIdentifierError(image_uuid) from exc

        url = f"{self.base_url.rstrip('/')}/{uuid}"
        body = self._fetch(url)
        try:
            return Image.model_validate_json(body)
        except pydantic.ValidationError as exc:
            logger.warning("Undecodable image from %s", url)
            raise DecodeError(f"Invalid image from {url}: {exc}") from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fetch(self, url: str) -> bytes:
        """GET *url* and return the body of a successful response."""
        logger.debug("GET %s", url)
        try:
            response = self.session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            logger.warning(
                "Request to %s returned status %s", url, response.status_code
            )
            raise TransportError(
                f"Request to {url} returned status {response.status_code}",
                status_code=response.status_code,
            ) from exc
        return response.content


def list_images(image_filter: Optional[ImageFilter] = None) -> List[Image]:
    """List images from the public catalog with a throwaway client."""
    with CatalogClient() as client:
        return client.list(image_filter)


def get_image(image_uuid: str) -> Image:
    """Fetch one image from the public catalog with a throwaway client."""
    with CatalogClient() as client:
        return client.get(image_uuid)
