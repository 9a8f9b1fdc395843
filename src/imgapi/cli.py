"""CLI entry point for imgapi."""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional
from uuid import UUID

import click

from .core import DEFAULT_IMGAPI_URL, CatalogClient
from .errors import ImgapiError, ValidationError
from .models import Image, ImageFilter, ImageState, OperatingSystem

_UNSUPPORTED_KEYS = ("tag", "marker")


def _parse_bool(key: str, value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValidationError(f"{key} must be either true or false")


def _parse_uuid(key: str, value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(f"{key} must be a valid UUID") from None


def parse_filter_args(tokens: tuple[str, ...]) -> ImageFilter:
    """
    Build an ``ImageFilter`` from ``key=value`` tokens.

    ``billing_tag`` may be repeated.  Any other repeated key keeps the last
    value.
    """
    image_filter = ImageFilter()
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep:
            raise ValidationError(f"expected key=value, got: {token}")

        if key == "account":
            image_filter.account = _parse_uuid(key, value)
        elif key == "channel":
            image_filter.channel = value
        elif key == "inclAdminFields":
            image_filter.include_admin_fields = _parse_bool(key, value)
        elif key == "owner":
            image_filter.owner = _parse_uuid(key, value)
        elif key == "state":
            image_filter.state = ImageState.parse(value)
        elif key == "name":
            image_filter.name = value
        elif key == "version":
            image_filter.version = value
        elif key == "public":
            image_filter.public = _parse_bool(key, value)
        elif key == "os":
            image_filter.os = OperatingSystem.parse(value)
        elif key == "type":
            image_filter.image_type = value
        elif key == "billing_tag":
            image_filter.billing_tag = [*(image_filter.billing_tag or []), value]
        elif key == "limit":
            if not (value.isascii() and value.isdigit()):
                raise ValidationError("limit must be a non-negative integer")
            image_filter.limit = int(value)
        elif key in _UNSUPPORTED_KEYS:
            raise ValidationError(f"query filter {key!r} is not supported yet")
        else:
            raise ValidationError(f"unexpected query filter: {token}")
    return image_filter


def _image_json(image: Image) -> dict:
    return image.model_dump(mode="json", by_alias=True, exclude_none=True)


@click.group()
@click.version_option()
@click.option(
    "--url",
    "base_url",
    default=DEFAULT_IMGAPI_URL,
    show_default=True,
    help="Base URL of the IMGAPI images endpoint.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Request timeout in seconds (default: none).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log requests to stderr.")
@click.pass_context
def main(
    ctx: click.Context, base_url: str, timeout: Optional[float], verbose: bool
) -> None:
    """Query an IMGAPI image catalog."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["timeout"] = timeout


def _client(ctx: click.Context) -> CatalogClient:
    try:
        return CatalogClient(
            base_url=ctx.obj["base_url"], timeout=ctx.obj["timeout"]
        )
    except ImgapiError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@main.command("list")
@click.argument("filters", nargs=-1)
@click.option("--json", "as_json", is_flag=True, help="Print images as JSON.")
@click.pass_context
def list_command(ctx: click.Context, filters: tuple[str, ...], as_json: bool) -> None:
    """List images matching KEY=VALUE filters (e.g. os=linux name=~base)."""
    try:
        image_filter = parse_filter_args(filters)
    except ValidationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    try:
        with _client(ctx) as client:
            images = client.list(image_filter)
    except ImgapiError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([_image_json(img) for img in images], indent=2))
        return

    click.echo(f"found {len(images)} image(s) matching filter")
    for img in images:
        click.echo(
            f"  {img.uuid}  {img.name:<24} {img.version:<16} "
            f"{img.os:<8} {img.state}"
        )


@main.command("get")
@click.argument("image_uuid")
@click.option("--json", "as_json", is_flag=True, help="Print the image as JSON.")
@click.pass_context
def get_command(ctx: click.Context, image_uuid: str, as_json: bool) -> None:
    """Show a single image by UUID."""
    try:
        with _client(ctx) as client:
            img = client.get(image_uuid)
    except ImgapiError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(_image_json(img), indent=2))
        return

    click.echo(f"UUID     : {img.uuid}")
    click.echo(f"Name     : {img.name}")
    click.echo(f"Version  : {img.version}")
    click.echo(f"Type     : {img.image_type}")
    click.echo(f"OS       : {img.os}")
    click.echo(f"State    : {img.state}")
    click.echo(f"Public   : {str(img.public).lower()}")
    if img.published_at:
        click.echo(f"Published: {img.published_at.isoformat()}")
    if img.description:
        click.echo(f"Desc     : {img.description}")
    if img.error:
        click.echo(f"Error    : {img.error}")
    click.echo(f"\nFiles ({len(img.files)}):")
    for f in img.files:
        click.echo(f"  {f.sha1}  {f.size:>12,} bytes  {f.compression}")


if __name__ == "__main__":
    main()
