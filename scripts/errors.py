"""Exceptions raised while transforming, baking and verifying documents."""


class BakeError(Exception):
    """Base class for every sealmark failure."""


class InvalidViewport(BakeError):
    def __init__(self, width, height):
        super().__init__(f"Viewport must have positive dimensions, got {width}x{height}")
        self.width = width
        self.height = height


class InvalidRectangle(BakeError):
    pass


class UnsupportedMediaType(BakeError):
    def __init__(self, media_type):
        super().__init__(f"Unsupported image format: {media_type!r}. Use PNG or JPEG.")
        self.media_type = media_type


class PageIndexOutOfBounds(BakeError):
    def __init__(self, page_index, page_count):
        super().__init__(f"Page {page_index} does not exist (document has {page_count} pages)")
        self.page_index = page_index
        self.page_count = page_count


class EmptyDocument(BakeError):
    pass


class IntegrityMismatch(BakeError):
    def __init__(self, status, expected, actual=None):
        super().__init__(f"Integrity check {status}: expected {expected}, got {actual}")
        self.status = status
        self.expected = expected
        self.actual = actual


class UnsupportedText(BakeError):
    def __init__(self, text, font_name, characters):
        super().__init__(f"Font {font_name} cannot encode {characters!r} in {text!r}")
        self.text = text
        self.font_name = font_name
        self.characters = characters
