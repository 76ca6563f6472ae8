"""Coordinate transforms between capture space and PDF page space.

Capture space is the rendering surface a field was placed on: pixels,
origin at the top-left corner, relative to a viewport of known size.
Page space is the PDF's native system: points, origin at the bottom-left
corner, relative to one page's MediaBox.
"""

from dataclasses import dataclass

from errors import InvalidRectangle, InvalidViewport

A4_WIDTH_POINTS = 595.28
A4_HEIGHT_POINTS = 841.89


@dataclass(frozen=True)
class ViewportSize:
    width: float
    height: float


@dataclass(frozen=True)
class PageSize:
    width: float
    height: float


DEFAULT_PAGE_SIZE = PageSize(A4_WIDTH_POINTS, A4_HEIGHT_POINTS)


@dataclass(frozen=True)
class CaptureRect:
    """A field box as placed on the capture surface."""

    x: float
    y: float
    width: float
    height: float
    page_index: int = 0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidRectangle(f"Rectangle must have positive size, got {self.width}x{self.height}")
        if self.page_index < 0:
            raise InvalidRectangle(f"Page index must be >= 0, got {self.page_index}")


@dataclass(frozen=True)
class PageRect:
    """A box in PDF points, (x, y) being its bottom-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def aspect(self):
        return self.width / self.height


@dataclass(frozen=True)
class NormalizedRect:
    # Not clamped: values outside [0, 1] are legal.
    x_percent: float
    y_percent: float
    width_percent: float
    height_percent: float
    page_index: int = 0


def check_viewport(viewport):
    if viewport is None:
        raise InvalidViewport(None, None)
    if viewport.width <= 0 or viewport.height <= 0:
        raise InvalidViewport(viewport.width, viewport.height)


def to_page_space(rect: CaptureRect, viewport: ViewportSize, page: PageSize = DEFAULT_PAGE_SIZE) -> PageRect:
    """Map a capture rectangle onto a page, flipping the vertical axis."""
    check_viewport(viewport)
    scale_x = page.width / viewport.width
    scale_y = page.height / viewport.height

    width = rect.width * scale_x
    height = rect.height * scale_y
    # The box is anchored by its top edge in capture space
    y_from_top = rect.y * scale_y
    return PageRect(
        x=rect.x * scale_x,
        y=page.height - y_from_top - height,
        width=width,
        height=height,
    )


def to_capture_space(rect: PageRect, viewport: ViewportSize, page: PageSize = DEFAULT_PAGE_SIZE,
                     page_index: int = 0) -> CaptureRect:
    """Inverse of to_page_space."""
    check_viewport(viewport)
    scale_x = viewport.width / page.width
    scale_y = viewport.height / page.height

    y_from_top = page.height - rect.y - rect.height
    return CaptureRect(
        x=rect.x * scale_x,
        y=y_from_top * scale_y,
        width=rect.width * scale_x,
        height=rect.height * scale_y,
        page_index=page_index,
    )


def normalize(rect: CaptureRect, viewport: ViewportSize) -> NormalizedRect:
    check_viewport(viewport)
    return NormalizedRect(
        x_percent=rect.x / viewport.width,
        y_percent=rect.y / viewport.height,
        width_percent=rect.width / viewport.width,
        height_percent=rect.height / viewport.height,
        page_index=rect.page_index,
    )


def denormalize(norm: NormalizedRect, viewport: ViewportSize) -> CaptureRect:
    check_viewport(viewport)
    return CaptureRect(
        x=norm.x_percent * viewport.width,
        y=norm.y_percent * viewport.height,
        width=norm.width_percent * viewport.width,
        height=norm.height_percent * viewport.height,
        page_index=norm.page_index,
    )


def rescale(rect: CaptureRect, from_viewport: ViewportSize, to_viewport: ViewportSize) -> CaptureRect:
    """Carry a rectangle captured on one viewport over to another one."""
    if from_viewport == to_viewport:
        check_viewport(from_viewport)
        return rect
    return denormalize(normalize(rect, from_viewport), to_viewport)
