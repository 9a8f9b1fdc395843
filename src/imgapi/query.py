"""Encoding of ``ImageFilter`` search criteria into URL query strings."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple
from urllib.parse import parse_qs, urlencode

from .models import ImageFilter

__all__ = [
    "decode_query",
    "encode_filter",
]

# (attribute, query key) in emission order; tags and billing tags follow.
_SCALAR_PARAMS: List[Tuple[str, str]] = [
    ("account", "account"),
    ("channel", "channel"),
    ("include_admin_fields", "inclAdminFields"),
    ("owner", "owner"),
    ("state", "state"),
    ("name", "name"),
    ("version", "version"),
    ("public", "public"),
    ("os", "os"),
    ("image_type", "type"),
    ("limit", "limit"),
]

_TAG_PREFIX = "tag."
_BILLING_TAG_KEY = "billing_tag"


def _param_value(value: Any) -> str:
    """Return the textual query form of a single filter value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    as_param = getattr(value, "as_param", None)
    if as_param is not None:
        return as_param()
    return str(value)


def encode_filter(image_filter: ImageFilter) -> str:
    """
    Encode *image_filter* as a form-encoded query string.

    Unset fields are skipped, so an empty filter encodes to ``""``.  Tags
    are emitted sorted by key and billing tags in list order, which keeps
    the output reproducible.  Values are not validated here.
    """
    pairs: List[Tuple[str, str]] = []

    for attr, key in _SCALAR_PARAMS:
        value = getattr(image_filter, attr)
        if value is not None:
            pairs.append((key, _param_value(value)))

    if image_filter.tag:
        for tag_key in sorted(image_filter.tag):
            pairs.append((f"{_TAG_PREFIX}{tag_key}", image_filter.tag[tag_key]))

    if image_filter.billing_tag:
        for billing_tag in image_filter.billing_tag:
            pairs.append((_BILLING_TAG_KEY, billing_tag))

    return urlencode(pairs)


def decode_query(query: str) -> Dict[str, List[str]]:
    """Parse *query* into a multi-map of key to values, keeping blank values."""
    return parse_qs(query, keep_blank_values=True)
