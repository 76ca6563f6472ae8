"""Draw one field onto one page of a PDF revision.

Each field is rendered onto a single-page reportlab overlay the size of the
target page, which is then merged onto that page with pypdf. The input
revision is never touched; a new revision (bytes) is returned.
"""

import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader, PdfWriter
from pypdf.generic import IndirectObject
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import standardFonts
from reportlab.pdfgen import canvas

from errors import PageIndexOutOfBounds, UnsupportedMediaType, UnsupportedText
from fields import ChoiceField, DateField, ImageField, SignatureField, TextField
from geometry import DEFAULT_PAGE_SIZE, PageRect, PageSize, ViewportSize, to_page_space

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = {"png", "image/png", "jpeg", "jpg", "image/jpeg", "image/jpg"}


def utcnow():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class InjectionConfig:
    font_name: str = "Helvetica"
    font_size: float = 12
    text_inset: float = 5
    choice_inset: float = 2
    choice_fill_ratio: float = 0.6
    default_page_size: PageSize = DEFAULT_PAGE_SIZE
    clock: Callable[[], datetime] = utcnow


DEFAULT_CONFIG = InjectionConfig()


def resolve(obj):
    while isinstance(obj, IndirectObject):
        obj = obj.get_object()
    return obj


def page_size(page, default=DEFAULT_PAGE_SIZE):
    """Physical size of a pypdf page, falling back to ``default`` without a MediaBox."""
    if resolve(page.get("/MediaBox")) is None:
        return default
    box = page.mediabox
    return PageSize(float(box.width), float(box.height))


# ---------------------------------------------------------------------------
# Placement math
# ---------------------------------------------------------------------------

def fit_image(image_width, image_height, box: PageRect) -> PageRect:
    """Largest rectangle with the image's aspect ratio that fits in ``box``, centred."""
    image_aspect = image_width / image_height
    if image_aspect > box.aspect:
        # Relatively wider than the box: clamp width, centre vertically
        width = box.width
        height = box.width / image_aspect
        return PageRect(box.x, box.y + (box.height - height) / 2, width, height)
    height = box.height
    width = box.height * image_aspect
    return PageRect(box.x + (box.width - width) / 2, box.y, width, height)


def text_origin(box: PageRect, font_size, inset=5):
    """Baseline start for left-aligned text centred on the box's midline."""
    return box.x + inset, box.y + box.height / 2 - font_size / 2


def choice_circle(box: PageRect, inset=2):
    """Centre and radius of the choice marker's outline circle."""
    radius = min(box.width, box.height) / 2 - inset
    if radius <= 0:
        radius = min(box.width, box.height) / 2
    return box.x + box.width / 2, box.y + box.height / 2, radius


def decode_image(payload):
    """Open a raster payload with Pillow, accepting only PNG and JPEG."""
    if str(payload.format).strip().lower() not in SUPPORTED_FORMATS:
        raise UnsupportedMediaType(payload.format)
    try:
        image = Image.open(io.BytesIO(payload.data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedMediaType(payload.format) from e
    # Some camera JPEGs open as MPO
    if image.format not in ("PNG", "JPEG", "MPO"):
        raise UnsupportedMediaType(image.format)
    return image


def check_encodable(text, font_name):
    """Raise UnsupportedText if a standard PDF font cannot show every character.

    The standard fonts other than Symbol and ZapfDingbats use WinAnsiEncoding
    (cp1252); reportlab would draw anything outside it as a placeholder glyph.
    Registered TrueType fonts carry their own glyphs and are not checked.
    """
    if font_name not in standardFonts or font_name in ("Symbol", "ZapfDingbats"):
        return
    missing = []
    for ch in text:
        try:
            ch.encode("cp1252")
        except UnicodeEncodeError:
            if ch not in missing:
                missing.append(ch)
    if missing:
        raise UnsupportedText(text, font_name, "".join(missing))


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------

def _draw_image(c, field, box, config):
    image = decode_image(field.payload)
    target = fit_image(image.width, image.height, box)
    c.drawImage(ImageReader(image), target.x, target.y,
                width=target.width, height=target.height, mask="auto")


def _draw_text(c, text, font_size, box, config):
    check_encodable(text, config.font_name)
    size = font_size or config.font_size
    x, y = text_origin(box, size, config.text_inset)
    c.setFillColorRGB(0, 0, 0)
    c.setFont(config.font_name, size)
    c.drawString(x, y, text)


def _draw_choice(c, field, box, config):
    cx, cy, radius = choice_circle(box, config.choice_inset)
    c.setStrokeColorRGB(0, 0, 0)
    c.setLineWidth(1)
    c.circle(cx, cy, radius, stroke=1, fill=0)
    if field.selected:
        c.setFillColorRGB(0, 0, 0)
        c.circle(cx, cy, radius * config.choice_fill_ratio, stroke=0, fill=1)


def create_overlay(field, box: PageRect, size: PageSize, config=DEFAULT_CONFIG):
    """Render a single field onto a blank page of ``size``; returns PDF bytes."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(size.width, size.height), invariant=1)

    if isinstance(field, (SignatureField, ImageField)):
        _draw_image(c, field, box, config)
    elif isinstance(field, TextField):
        _draw_text(c, field.text, field.font_size, box, config)
    elif isinstance(field, DateField):
        _draw_text(c, field.date, field.font_size, box, config)
    elif isinstance(field, ChoiceField):
        _draw_choice(c, field, box, config)
    else:
        raise TypeError(f"Unknown field type: {type(field).__name__}")

    c.showPage()
    c.save()
    return buf.getvalue()


def inject(revision: bytes, field, viewport: ViewportSize, config=DEFAULT_CONFIG) -> bytes:
    """Return a new revision with ``field`` drawn on its page."""
    reader = PdfReader(io.BytesIO(revision))
    page_index = field.rect.page_index
    page_count = len(reader.pages)
    if page_index >= page_count:
        raise PageIndexOutOfBounds(page_index, page_count)

    size = page_size(reader.pages[page_index], config.default_page_size)
    box = to_page_space(field.rect, viewport, size)
    logger.debug("Injecting %s on page %d at (%.2f, %.2f, %.2f x %.2f)",
                 field.kind.value, page_index, box.x, box.y, box.width, box.height)

    overlay_page = PdfReader(io.BytesIO(create_overlay(field, box, size, config))).pages[0]

    writer = PdfWriter(clone_from=reader)
    writer.pages[page_index].merge_page(overlay_page)

    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()
