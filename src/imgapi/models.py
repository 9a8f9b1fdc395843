"""Pydantic models for imgapi."""

from __future__ import annotations

import functools
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import AnyUrl, BaseModel, ConfigDict, Field

from .errors import ValidationError

__all__ = [
    "BootRom",
    "Compression",
    "File",
    "Image",
    "ImageError",
    "ImageErrorCode",
    "ImageFilter",
    "ImageState",
    "ImageType",
    "Network",
    "OperatingSystem",
    "Requirements",
    "User",
]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


@functools.total_ordering
class ImageState(Enum):
    """The current state of an image, ordered by declaration."""

    ACTIVE = "active"
    UNACTIVATED = "unactivated"
    DISABLED = "disabled"           # activated, but disabled == true
    CREATING = "creating"           # placeholder during async creation
    FAILED = "failed"               # placeholder after failed creation

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ImageState):
            return NotImplemented
        return _STATE_RANKS[self] < _STATE_RANKS[other]

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> ImageState:
        try:
            return cls(text.lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValidationError(f"state must be one of: {choices}") from None


_STATE_RANKS: Dict[ImageState, int] = {
    state: rank for rank, state in enumerate(ImageState)
}


class Compression(Enum):
    """The type of compression used for an image file."""

    BZIP2 = "bzip2"
    GZIP = "gzip"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


class OperatingSystem(Enum):
    """
    The OS family an image provides.

    The member value is the short form used on the wire and in query
    strings; ``str()`` gives the human-readable name.
    """

    SMARTOS = "smartos"
    WINDOWS = "windows"
    LINUX = "linux"
    BSD = "bsd"
    ILLUMOS = "illumos"
    OTHER = "other"

    def as_param(self) -> str:
        return self.value

    def __str__(self) -> str:
        return _OS_DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, text: str) -> OperatingSystem:
        """Parse *text* case-insensitively (``Linux``, ``linux`` and ``LINUX`` all work)."""
        try:
            return cls(text.lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValidationError(f"os must be one of: {choices}") from None


_OS_DISPLAY_NAMES: Dict[OperatingSystem, str] = {
    OperatingSystem.SMARTOS: "SmartOS",
    OperatingSystem.WINDOWS: "Windows",
    OperatingSystem.LINUX: "Linux",
    OperatingSystem.BSD: "BSD",
    OperatingSystem.ILLUMOS: "illumos",
    OperatingSystem.OTHER: "Other",
}


class ImageType(Enum):
    """Well-known values of ``Image.image_type``."""

    ZONE_DATASET = "zone-dataset"
    LX_DATASET = "lx-dataset"
    ZVOL = "zvol"
    OTHER = "other"

    def __str__(self) -> str:
        return _IMAGE_TYPE_DISPLAY_NAMES[self]


_IMAGE_TYPE_DISPLAY_NAMES: Dict[ImageType, str] = {
    ImageType.ZONE_DATASET: "SmartOS zone dataset",
    ImageType.LX_DATASET: "Lx-brand dataset",
    ImageType.ZVOL: "zvol",
    ImageType.OTHER: "Other",
}


class ImageErrorCode(Enum):
    """Error codes reported in ``ImageError.code`` for failed image creation."""

    PREPARE_IMAGE_DID_NOT_RUN = "PrepareImageDidNotRun"
    VM_HAS_NO_ORIGIN = "VmHasNoOrigin"
    NOT_SUPPORTED = "NotSupported"

    def __str__(self) -> str:
        return self.value


class BootRom(Enum):
    """The boot ROM an image uses."""

    BIOS = "bios"
    UEFI = "uefi"

    def __str__(self) -> str:
        return self.value.upper()


# ---------------------------------------------------------------------------
# Search criteria
# ---------------------------------------------------------------------------


class ImageFilter(BaseModel):
    """
    Search criteria for listing images.

    Every field is optional and an empty filter matches every image.
    ``name`` and ``version`` accept a ``~`` prefix for a substring match,
    ``image_type`` accepts a ``!`` prefix to exclude a type.  Entries in
    ``tag`` and ``billing_tag`` are combined with a logical AND.
    """

    model_config = ConfigDict(validate_assignment=True)

    account: Optional[UUID] = None
    channel: Optional[str] = None       # "*" lists all channels
    include_admin_fields: Optional[bool] = None
    owner: Optional[UUID] = None
    state: Optional[ImageState] = None
    name: Optional[str] = None
    version: Optional[str] = None
    public: Optional[bool] = None
    os: Optional[OperatingSystem] = None
    image_type: Optional[str] = None
    tag: Optional[Dict[str, str]] = None  # keys without the "tag." prefix
    billing_tag: Optional[List[str]] = None
    limit: Optional[int] = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Image manifest
# ---------------------------------------------------------------------------


class _ManifestModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ImageError(_ManifestModel):
    """Details on the failure of an asynchronous image action."""

    message: str
    code: Optional[str] = None      # CamelCase, see ImageErrorCode
    stack: Optional[str] = None

    def __str__(self) -> str:
        return self.message


class File(_ManifestModel):
    """
    An image file that makes up part or all of an image.

    The service may also send an administrative ``stor`` field; it is
    dropped on input and never serialized.
    """

    sha1: str
    size: int                       # bytes, at most 20 GiB
    compression: Compression
    dataset_guid: Optional[UUID] = None
    digest: Optional[str] = None    # docker images only
    uncompressed_digest: Optional[str] = Field(
        default=None, alias="uncompressedDigest"
    )


class Network(_ManifestModel):
    name: str
    description: str


class User(_ManifestModel):
    name: str


class Requirements(_ManifestModel):
    """Provisioning constraints for an image."""

    networks: List[Network] = Field(default_factory=list)
    brand: Optional[str] = None
    ssh_key: Optional[bool] = None
    min_ram: Optional[int] = None   # MiB
    max_ram: Optional[int] = None   # MiB
    min_platform: Optional[Dict[str, str]] = None
    max_platform: Optional[Dict[str, str]] = None
    boot_rom: Optional[str] = None


class Image(_ManifestModel):
    """
    One catalog entry as returned by the service.

    ``error`` is expected to be set only when ``state`` is
    ``ImageState.FAILED`` but the pairing is not checked: the service is
    authoritative.  Fields the model does not know about are ignored.
    """

    v: int
    uuid: UUID
    owner: UUID
    name: str
    version: str
    description: Optional[str] = None
    homepage: Optional[AnyUrl] = None
    eula: Optional[AnyUrl] = None
    icon: Optional[bool] = None
    state: ImageState
    error: Optional[ImageError] = None
    disabled: bool
    public: bool
    published_at: Optional[datetime] = None
    image_type: str = Field(alias="type")
    os: str
    origin: Optional[UUID] = None
    files: List[File]
    acl: Optional[List[UUID]] = None
    requirements: Optional[Requirements] = None
    users: Optional[List[User]] = None
    billing_tags: Optional[List[str]] = None
    traits: Optional[Any] = None
    tags: Optional[Dict[str, Any]] = None
    generate_passwords: Optional[bool] = None
    inherited_directories: Optional[List[str]] = None
    # zvol images only
    nic_driver: Optional[str] = None
    disk_driver: Optional[str] = None
    cpu_type: Optional[str] = None
    image_size: Optional[int] = None    # MiB
    channels: Optional[List[str]] = None

    @property
    def is_failed(self) -> bool:
        return self.state is ImageState.FAILED

    @property
    def should_generate_passwords(self) -> bool:
        """Whether passwords are generated for ``users``; unset means yes."""
        return self.generate_passwords is not False
