"""
imgapi quickstart: build filters, inspect the query string, and query a catalog.

Run directly:

    python examples/quickstart.py

Demos 1 and 2 run offline.  Demo 3 talks to the public catalog at
images.joyent.com and is skipped when the network is unavailable.
"""

from __future__ import annotations

import json


# ---------------------------------------------------------------------------
# Demo 1: Build a filter and encode it
# ---------------------------------------------------------------------------

def demo_encode_filter() -> None:
    """Build an ImageFilter and show the query string it produces."""
    print("\n=== Demo 1: Encode a filter ===")

    from imgapi.models import ImageFilter, ImageState, OperatingSystem
    from imgapi.query import decode_query, encode_filter

    image_filter = ImageFilter(
        name="~base",
        os=OperatingSystem.parse("SmartOS"),
        state=ImageState.ACTIVE,
        public=True,
        tag={"role": "os"},
        limit=5,
    )
    query = encode_filter(image_filter)
    print(f"  Query string : {query}")
    print(f"  Decoded      : {decode_query(query)}")
    print(f"  Empty filter : {encode_filter(ImageFilter())!r}")


# ---------------------------------------------------------------------------
# Demo 2: Decode a manifest
# ---------------------------------------------------------------------------

def demo_decode_manifest() -> None:
    """Decode a failed-image manifest as the service would return it."""
    print("\n=== Demo 2: Decode a manifest ===")

    from imgapi.models import Image

    manifest = {
        "v": 2,
        "uuid": "2b683a82-a066-11e3-97ab-2faa44701c5a",
        "owner": "930896af-bf8c-48d4-885c-6573a94b1853",
        "name": "my-custom-image",
        "version": "1.0.0",
        "state": "failed",
        "error": {"message": "VM has no origin", "code": "VmHasNoOrigin"},
        "disabled": False,
        "public": False,
        "type": "zvol",
        "os": "linux",
        "files": [{"sha1": "a" * 40, "size": 1024, "compression": "gzip", "stor": "local"}],
    }
    img = Image.model_validate(manifest)
    print(f"  Name   : {img.name} {img.version}")
    print(f"  State  : {img.state}")
    print(f"  Failed : {img.is_failed} ({img.error})")
    print("  Re-serialized:")
    print(json.dumps(img.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))


# ---------------------------------------------------------------------------
# Demo 3: Query the public catalog
# ---------------------------------------------------------------------------

def demo_list_images() -> None:
    """List a few public images from images.joyent.com."""
    print("\n=== Demo 3: List public images ===")

    from imgapi.core import CatalogClient
    from imgapi.errors import TransportError
    from imgapi.models import ImageFilter, OperatingSystem

    try:
        with CatalogClient(timeout=10) as client:
            images = client.list(ImageFilter(os=OperatingSystem.LINUX, limit=3))
    except TransportError as exc:
        print(f"  Skipped (network unavailable): {exc}")
        return

    for img in images:
        print(f"  {img.uuid}  {img.name:<24} {img.version}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    print("imgapi quickstart demo")
    print("=" * 40)

    demo_encode_filter()
    demo_decode_manifest()
    demo_list_images()

    print("\n" + "=" * 40)
    print("All demos completed.")


if __name__ == "__main__":
    main()
