"""Field model: one dataclass per field kind, plus loading from JSON dicts.

A field file looks like:
{
    "viewport": {"width": 800, "height": 1100},
    "fields": [
        {
            "type": "signature" | "image" | "text" | "date" | "radio" | "choice",
            "x": 100, "y": 900, "width": 200, "height": 60,   # capture pixels
            "page": 0,
            "image": "data:image/png;base64,...",   # signature/image
            "image_path": "/path/to/sig.png",       # signature/image, must exist
            "text": "Jane Doe",                     # text
            "date": "2026-10-18",                   # date (ISO is reformatted)
            "selected": true,                       # radio/choice, bool or "true"/"false"
            "font_size": 12,                        # text/date, optional
            "viewport": {"width": 400, "height": 550}  # optional, per field
        }
    ]
}
"""

import base64
import binascii
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import ClassVar, Optional, Union

from errors import BakeError
from geometry import CaptureRect, ViewportSize, rescale


class FieldKind(str, Enum):
    SIGNATURE = "signature"
    TEXT = "text"
    DATE = "date"
    IMAGE = "image"
    CHOICE = "choice"


KIND_ALIASES = {
    "signature": FieldKind.SIGNATURE,
    "initials": FieldKind.SIGNATURE,
    "text": FieldKind.TEXT,
    "date": FieldKind.DATE,
    "image": FieldKind.IMAGE,
    "photo": FieldKind.IMAGE,
    "choice": FieldKind.CHOICE,
    "radio": FieldKind.CHOICE,
}

DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*?;base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class RasterPayload:
    """Image content: a format tag ("png", "image/jpeg", ...) and the raw bytes."""

    format: str
    data: bytes

    @classmethod
    def from_data_url(cls, url, default_format="png"):
        match = DATA_URL_RE.match(url)
        if match:
            mime = match.group("mime") or default_format
            payload = match.group("data")
        else:
            mime, payload = default_format, url
        try:
            data = base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise BakeError(f"Invalid base64 image payload: {e}") from e
        return cls(format=mime, data=data)

    @classmethod
    def from_path(cls, path):
        path = Path(path)
        return cls(format=path.suffix.lstrip(".").lower(), data=path.read_bytes())


@dataclass(frozen=True)
class SignatureField:
    kind: ClassVar[FieldKind] = FieldKind.SIGNATURE
    rect: CaptureRect
    payload: Optional[RasterPayload] = None

    def is_complete(self):
        return self.payload is not None and bool(self.payload.data)


@dataclass(frozen=True)
class ImageField:
    kind: ClassVar[FieldKind] = FieldKind.IMAGE
    rect: CaptureRect
    payload: Optional[RasterPayload] = None

    def is_complete(self):
        return self.payload is not None and bool(self.payload.data)


@dataclass(frozen=True)
class TextField:
    kind: ClassVar[FieldKind] = FieldKind.TEXT
    rect: CaptureRect
    text: Optional[str] = None
    font_size: Optional[float] = None

    def is_complete(self):
        return bool(self.text)


@dataclass(frozen=True)
class DateField:
    """A date, already formatted for display. The injector draws it as text."""

    kind: ClassVar[FieldKind] = FieldKind.DATE
    rect: CaptureRect
    date: Optional[str] = None
    font_size: Optional[float] = None

    def is_complete(self):
        return bool(self.date)


@dataclass(frozen=True)
class ChoiceField:
    kind: ClassVar[FieldKind] = FieldKind.CHOICE
    rect: CaptureRect
    selected: bool = False

    def is_complete(self):
        # An unselected marker is still content
        return True


Field = Union[SignatureField, ImageField, TextField, DateField, ChoiceField]


def format_long_date(value):
    """Format an ISO date ("2026-10-18") as "October 18, 2026".

    Anything that is not an ISO date is returned unchanged.
    """
    if isinstance(value, date):
        parsed = value
    else:
        text = str(value).strip()
        # Accept "2026-10-18" and ISO datetimes, nothing looser
        if len(text) > 10 and text[10] not in "T ":
            return value
        try:
            parsed = date.fromisoformat(text[:10])
        except ValueError:
            return value
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def viewport_from_dict(data):
    if not data:
        return None
    return ViewportSize(float(data.get("width", 0)), float(data.get("height", 0)))


def _load_payload(spec, base_dir):
    image = spec.get("image") or spec.get("imageBase64")
    if image:
        return RasterPayload.from_data_url(image, spec.get("format", "png"))
    image_path = spec.get("image_path")
    if not image_path:
        return None
    path = Path(image_path)
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    try:
        return RasterPayload.from_path(path)
    except OSError as e:
        raise BakeError(f"Image not found: {path}") from e


_TRUE = ("true", "yes", "1")
_FALSE = ("false", "no", "0", "")


def _parse_bool(value):
    """JSON booleans pass through; the strings true/false (and yes/no, 1/0) are mapped."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, str)):
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise BakeError(f"Invalid choice value: {value!r}")


def field_from_dict(spec, viewport=None, base_dir=None) -> Field:
    """Build a field from its JSON form, rescaled onto ``viewport`` if needed."""
    field_type = str(spec.get("type", "")).lower()
    kind = KIND_ALIASES.get(field_type)
    if kind is None:
        raise BakeError(f"Unknown field type: {field_type!r}")

    coords = spec.get("coordinates", spec)
    rect = CaptureRect(
        x=float(coords.get("x", 0)),
        y=float(coords.get("y", 0)),
        width=float(coords.get("width", 0)),
        height=float(coords.get("height", 0)),
        page_index=int(coords.get("page", coords.get("pageNumber", 0)) or 0),
    )
    placed_on = viewport_from_dict(spec.get("viewport"))
    if placed_on is not None and viewport is not None:
        rect = rescale(rect, placed_on, viewport)

    font_size = spec.get("font_size")
    if font_size is not None:
        font_size = float(font_size)

    if kind is FieldKind.SIGNATURE:
        return SignatureField(rect, _load_payload(spec, base_dir))
    if kind is FieldKind.IMAGE:
        return ImageField(rect, _load_payload(spec, base_dir))
    if kind is FieldKind.TEXT:
        text = spec.get("text", spec.get("value"))
        return TextField(rect, str(text) if text is not None else None, font_size)
    if kind is FieldKind.DATE:
        value = spec.get("date", spec.get("value"))
        return DateField(rect, format_long_date(value) if value else None, font_size)
    return ChoiceField(rect, _parse_bool(spec.get("selected", spec.get("value", False))))


def load_fields(spec, base_dir=None):
    """Parse a field file dict into (viewport, [fields])."""
    viewport = viewport_from_dict(spec.get("viewport") or spec.get("viewportDimensions"))
    fields = [field_from_dict(f, viewport, base_dir) for f in spec.get("fields", [])]
    return viewport, fields
