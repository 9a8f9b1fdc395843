"""Shared test fixtures for imgapi."""

from __future__ import annotations

import json
from typing import Any, Optional
from unittest.mock import Mock

import pytest
import requests

from imgapi.core import CatalogClient

BASE_URL = "https://imgapi.test/images"
IMAGE_UUID = "2b683a82-a066-11e3-97ab-2faa44701c5a"
OWNER_UUID = "930896af-bf8c-48d4-885c-6573a94b1853"


# ---------------------------------------------------------------------------
# Manifest fixtures
# ---------------------------------------------------------------------------


def make_manifest(**overrides: Any) -> dict[str, Any]:
    """Return a realistic image manifest as the service would send it."""
    manifest: dict[str, Any] = {
        "v": 2,
        "uuid": IMAGE_UUID,
        "owner": OWNER_UUID,
        "name": "base64",
        "version": "13.4.0",
        "state": "active",
        "disabled": False,
        "public": True,
        "published_at": "2014-02-28T10:50:33Z",
        "type": "zone-dataset",
        "os": "smartos",
        "files": [
            {
                "sha1": "3bebb6ae2cdb26eef20cfb30fdc4a00a059a0b7b",
                "size": 110742036,
                "compression": "gzip",
                "stor": "manta",
            }
        ],
        "description": "A 64-bit SmartOS image with just essential packages installed.",
        "homepage": "https://docs.joyent.com/images/smartos/base",
        "urn": "sdc:sdc:base64:13.4.0",
        "requirements": {
            "networks": [{"name": "net0", "description": "public"}],
            "min_platform": {"7.0": "20130729T063445Z"},
        },
        "tags": {"role": "os", "group": "base64"},
    }
    manifest.update(overrides)
    return manifest


@pytest.fixture()
def manifest() -> dict[str, Any]:
    return make_manifest()


@pytest.fixture()
def failed_manifest() -> dict[str, Any]:
    return make_manifest(
        state="failed",
        error={
            "message": "Prepare image script did not run.",
            "code": "PrepareImageDidNotRun",
        },
    )


# ---------------------------------------------------------------------------
# Transport stand-ins
# ---------------------------------------------------------------------------


def make_response(
    payload: Any = None, status_code: int = 200, body: Optional[bytes] = None
) -> Mock:
    """Build a ``requests.Response`` stand-in carrying *payload* as JSON."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.content = body if body is not None else json.dumps(payload).encode()
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Client Error", response=response
        )
    return response


@pytest.fixture()
def session() -> Mock:
    return Mock(spec=requests.Session)


@pytest.fixture()
def client(session: Mock) -> CatalogClient:
    return CatalogClient(base_url=BASE_URL, session=session)
