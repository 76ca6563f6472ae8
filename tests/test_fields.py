"""Tests for the field model and the fields file loader."""

import base64
from datetime import date

import pytest

from errors import BakeError, InvalidRectangle
from fields import (
    ChoiceField, DateField, FieldKind, ImageField, RasterPayload, SignatureField, TextField,
    field_from_dict, format_long_date, load_fields,
)
from geometry import CaptureRect, ViewportSize

RECT = {"x": 100, "y": 900, "width": 200, "height": 60, "page": 0}


class TestCompleteness:
    def test_image_kinds_need_payload(self):
        rect = CaptureRect(1, 1, 1, 1)
        assert not SignatureField(rect).is_complete()
        assert not ImageField(rect, RasterPayload("png", b"")).is_complete()
        assert SignatureField(rect, RasterPayload("png", b"\x89PNG")).is_complete()

    def test_text_kinds_need_string(self):
        rect = CaptureRect(1, 1, 1, 1)
        assert not TextField(rect).is_complete()
        assert not TextField(rect, "").is_complete()
        assert TextField(rect, "a").is_complete()
        assert not DateField(rect).is_complete()
        assert DateField(rect, "October 18, 2026").is_complete()

    def test_choice_always_complete(self):
        rect = CaptureRect(1, 1, 1, 1)
        assert ChoiceField(rect, False).is_complete()
        assert ChoiceField(rect, True).is_complete()

    def test_kind_tags(self):
        rect = CaptureRect(1, 1, 1, 1)
        assert SignatureField(rect).kind is FieldKind.SIGNATURE
        assert ChoiceField(rect).kind is FieldKind.CHOICE


class TestRasterPayload:
    def test_data_url(self, png_400x100):
        url = "data:image/png;base64," + base64.b64encode(png_400x100).decode()
        payload = RasterPayload.from_data_url(url)
        assert payload.format == "image/png"
        assert payload.data == png_400x100

    def test_bare_base64_uses_default_format(self, jpeg_100x100):
        payload = RasterPayload.from_data_url(base64.b64encode(jpeg_100x100).decode(), "jpeg")
        assert payload.format == "jpeg"
        assert payload.data == jpeg_100x100

    def test_from_path(self, tmp_path, png_400x100):
        path = tmp_path / "sig.PNG"
        path.write_bytes(png_400x100)
        payload = RasterPayload.from_path(path)
        assert payload.format == "png"
        assert payload.data == png_400x100


class TestFormatLongDate:
    @pytest.mark.parametrize("value,expected", [
        ("2026-10-18", "October 18, 2026"),
        ("2026-01-05T10:00:00", "January 5, 2026"),
        (date(2024, 2, 29), "February 29, 2024"),
    ])
    def test_iso_dates(self, value, expected):
        assert format_long_date(value) == expected

    @pytest.mark.parametrize("value", ["18/10/2026", "October 18, 2026", "tomorrow", "2026-13-01"])
    def test_other_strings_pass_through(self, value):
        assert format_long_date(value) == value


class TestFieldFromDict:
    def test_signature_with_data_url(self, png_400x100):
        url = "data:image/png;base64," + base64.b64encode(png_400x100).decode()
        field = field_from_dict({"type": "signature", "image": url, **RECT})
        assert isinstance(field, SignatureField)
        assert field.rect == CaptureRect(100, 900, 200, 60, 0)
        assert field.is_complete()

    def test_image_path_relative_to_base_dir(self, tmp_path, png_400x100):
        (tmp_path / "photo.png").write_bytes(png_400x100)
        field = field_from_dict({"type": "photo", "image_path": "photo.png", **RECT}, base_dir=tmp_path)
        assert isinstance(field, ImageField)
        assert field.payload.data == png_400x100

    def test_missing_image_path_raises(self, tmp_path):
        with pytest.raises(BakeError, match="Image not found"):
            field_from_dict({"type": "signature", "image_path": "typo.png", **RECT}, base_dir=tmp_path)

    def test_no_image_at_all_is_incomplete(self):
        field = field_from_dict({"type": "image", **RECT})
        assert field.payload is None
        assert not field.is_complete()

    def test_text_and_font_size(self):
        field = field_from_dict({"type": "text", "text": "Jane", "font_size": 9, **RECT})
        assert field == TextField(CaptureRect(100, 900, 200, 60), "Jane", 9.0)

    def test_date_is_formatted(self):
        field = field_from_dict({"type": "date", "date": "2026-10-18", **RECT})
        assert field.date == "October 18, 2026"

    def test_radio_alias(self):
        field = field_from_dict({"type": "radio", "selected": True, **RECT})
        assert field == ChoiceField(CaptureRect(100, 900, 200, 60), True)

    @pytest.mark.parametrize("value,expected", [
        (True, True), (False, False), ("true", True), ("false", False), ("False", False),
        ("yes", True), ("no", False), (1, True), (0, False),
    ])
    def test_choice_selected_values(self, value, expected):
        field = field_from_dict({"type": "choice", "selected": value, **RECT})
        assert field.selected is expected

    def test_choice_unselected_by_default(self):
        assert field_from_dict({"type": "choice", **RECT}).selected is False

    @pytest.mark.parametrize("value", ["maybe", 2, [], {"on": True}])
    def test_choice_rejects_other_values(self, value):
        with pytest.raises(BakeError, match="Invalid choice value"):
            field_from_dict({"type": "choice", "selected": value, **RECT})

    def test_nested_coordinates(self):
        field = field_from_dict({
            "type": "text", "text": "t",
            "coordinates": {"x": 1, "y": 2, "width": 3, "height": 4, "pageNumber": 2},
        })
        assert field.rect == CaptureRect(1, 2, 3, 4, 2)

    def test_per_field_viewport_is_rescaled(self):
        field = field_from_dict(
            {"type": "text", "text": "t", "x": 50, "y": 100, "width": 100, "height": 20,
             "viewport": {"width": 400, "height": 550}},
            viewport=ViewportSize(800, 1100),
        )
        assert (field.rect.x, field.rect.y, field.rect.width, field.rect.height) == pytest.approx((100, 200, 200, 40))

    def test_unknown_type(self):
        with pytest.raises(BakeError):
            field_from_dict({"type": "stamp", **RECT})

    def test_zero_size_rejected(self):
        with pytest.raises(InvalidRectangle):
            field_from_dict({"type": "text", "text": "t", "x": 0, "y": 0, "width": 0, "height": 10})


def test_load_fields():
    viewport, fields = load_fields({
        "viewport": {"width": 800, "height": 1100},
        "fields": [
            {"type": "text", "text": "a", **RECT},
            {"type": "choice", **RECT},
        ],
    })
    assert viewport == ViewportSize(800, 1100)
    assert [f.kind for f in fields] == [FieldKind.TEXT, FieldKind.CHOICE]


def test_load_fields_without_viewport():
    viewport, fields = load_fields({"fields": []})
    assert viewport is None
    assert fields == []
