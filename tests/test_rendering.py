from __future__ import annotations

import unittest

from field_burner.contracts import Box, FieldPlacement, FieldStatus, FieldType, SkipReason
from field_burner.rendering import (
    DataUrlError,
    acquire_text_font,
    is_checked,
    parse_data_url,
    render_field,
)

from tests.pdf_fixtures import RecordingCanvas, broken_png_data_url, image_data_url

BOX = Box(x=10.0, y=20.0, width=100.0, height=30.0)


def _placement(field_type: FieldType, value=None) -> FieldPlacement:
    return FieldPlacement(
        id=f"{field_type.value}-1",
        type=field_type,
        page_index=0,
        x_pct=0.1,
        y_pct=0.1,
        w_pct=0.2,
        h_pct=0.05,
        value=value,
    )


class TestParseDataUrl(unittest.TestCase):
    def test_splits_media_type_and_payload(self) -> None:
        media_type, payload = parse_data_url("data:image/png;base64,aGVsbG8=")
        self.assertEqual(media_type, "image/png")
        self.assertEqual(payload, b"hello")

    def test_rejects_plain_strings(self) -> None:
        with self.assertRaises(DataUrlError) as ctx:
            parse_data_url("https://example.com/sig.png")
        self.assertIs(ctx.exception.reason, SkipReason.BAD_DATA_URI)

    def test_rejects_non_base64_data_url(self) -> None:
        with self.assertRaises(DataUrlError) as ctx:
            parse_data_url("data:image/svg+xml,<svg/>")
        self.assertIs(ctx.exception.reason, SkipReason.BAD_DATA_URI)

    def test_rejects_corrupt_base64(self) -> None:
        with self.assertRaises(DataUrlError) as ctx:
            parse_data_url("data:image/png;base64,@@not-base64@@")
        self.assertIs(ctx.exception.reason, SkipReason.BAD_BASE64)


class TestRadio(unittest.TestCase):
    def test_unchecked_radio_draws_outline_only(self) -> None:
        canv = RecordingCanvas()
        outcome = render_field(canv, _placement(FieldType.RADIO), BOX, acquire_text_font())

        self.assertEqual(outcome.status, FieldStatus.DRAWN)
        self.assertEqual(outcome.primitives, ("outline",))
        self.assertIn("rect", canv.names())
        self.assertNotIn("circle", canv.names())

    def test_checked_radio_draws_outline_and_marker(self) -> None:
        canv = RecordingCanvas()
        outcome = render_field(canv, _placement(FieldType.RADIO, "checked"), BOX, acquire_text_font())

        self.assertEqual(outcome.primitives, ("outline", "marker"))
        rect_args, rect_kwargs = canv.first("rect")
        self.assertEqual(rect_args, (10.0, 20.0, 100.0, 30.0))
        self.assertEqual(rect_kwargs, {"stroke": 1, "fill": 0})
        circle_args, circle_kwargs = canv.first("circle")
        self.assertEqual(circle_args, (60.0, 35.0, 25.0))
        self.assertEqual(circle_kwargs, {"stroke": 1, "fill": 1})
        self.assertLess(canv.names().index("rect"), canv.names().index("circle"))

    def test_checked_signal(self) -> None:
        for value in ("checked", "true", "on", True, 1):
            self.assertTrue(is_checked(value), value)
        for value in (None, "", "  ", "false", "Unchecked", "off", False, 0):
            self.assertFalse(is_checked(value), value)


class _FailingDrawCanvas(RecordingCanvas):
    def drawString(self, *args, **kwargs):
        raise RuntimeError("glyph missing")

    def circle(self, *args, **kwargs):
        raise RuntimeError("path overflow")


class TestTextAndDate(unittest.TestCase):
    def test_text_hangs_from_top_left_with_inset(self) -> None:
        canv = RecordingCanvas()
        font = acquire_text_font("Helvetica", 10)
        outcome = render_field(canv, _placement(FieldType.TEXT, "Jane Doe"), BOX, font)

        self.assertEqual(outcome.primitives, ("text",))
        self.assertEqual(canv.first("setFont")[0], ("Helvetica", 10))
        self.assertEqual(canv.first("drawString")[0], (12.0, 38.0, "Jane Doe"))

    def test_date_is_drawn_verbatim(self) -> None:
        canv = RecordingCanvas()
        render_field(canv, _placement(FieldType.DATE, "18/10/2026"), BOX, acquire_text_font())

        self.assertEqual(canv.first("drawString")[0][2], "18/10/2026")

    def test_graphics_state_is_restored_when_drawing_fails(self) -> None:
        for field_type, value in [(FieldType.TEXT, "Jane"), (FieldType.RADIO, "checked")]:
            with self.subTest(field_type=field_type):
                canv = _FailingDrawCanvas()
                with self.assertRaises(RuntimeError):
                    render_field(canv, _placement(field_type, value), BOX, acquire_text_font())
                self.assertEqual(canv.names()[0], "saveState")
                self.assertEqual(canv.names()[-1], "restoreState")

    def test_missing_value_draws_nothing(self) -> None:
        for value in (None, ""):
            canv = RecordingCanvas()
            outcome = render_field(canv, _placement(FieldType.TEXT, value), BOX, acquire_text_font())

            self.assertEqual(outcome.status, FieldStatus.SKIPPED)
            self.assertIs(outcome.skip_reason, SkipReason.NO_VALUE)
            self.assertEqual(canv.calls, [])


class TestImages(unittest.TestCase):
    def test_png_signature_stretches_to_box(self) -> None:
        canv = RecordingCanvas()
        outcome = render_field(canv, _placement(FieldType.SIGNATURE, image_data_url()), BOX, acquire_text_font())

        self.assertEqual(outcome.status, FieldStatus.DRAWN)
        args, kwargs = canv.first("drawImage")
        self.assertEqual(args[1:], (10.0, 20.0))
        self.assertEqual((kwargs["width"], kwargs["height"]), (100.0, 30.0))

    def test_jpeg_image_is_drawn(self) -> None:
        canv = RecordingCanvas()
        value = image_data_url(fmt="JPEG", media_type="image/jpeg")
        outcome = render_field(canv, _placement(FieldType.IMAGE, value), BOX, acquire_text_font())

        self.assertEqual(outcome.primitives, ("image",))

    def test_unsupported_media_type_is_skipped(self) -> None:
        canv = RecordingCanvas()
        value = image_data_url(fmt="GIF", media_type="image/gif")
        outcome = render_field(canv, _placement(FieldType.IMAGE, value), BOX, acquire_text_font())

        self.assertIs(outcome.skip_reason, SkipReason.UNSUPPORTED_MEDIA_TYPE)
        self.assertEqual(canv.calls, [])

    def test_undecodable_image_is_skipped(self) -> None:
        canv = RecordingCanvas()
        value = "data:image/png;base64,aGVsbG8gd29ybGQ="
        outcome = render_field(canv, _placement(FieldType.SIGNATURE, value), BOX, acquire_text_font())

        self.assertIs(outcome.skip_reason, SkipReason.UNDECODABLE_IMAGE)
        self.assertEqual(canv.calls, [])

    def test_truncated_png_stream_is_skipped(self) -> None:
        canv = RecordingCanvas()
        outcome = render_field(canv, _placement(FieldType.SIGNATURE, broken_png_data_url()), BOX, acquire_text_font())

        self.assertIs(outcome.status, FieldStatus.SKIPPED)
        self.assertIs(outcome.skip_reason, SkipReason.UNDECODABLE_IMAGE)
        self.assertEqual(canv.calls, [])

    def test_missing_signature_is_skipped(self) -> None:
        outcome = render_field(RecordingCanvas(), _placement(FieldType.SIGNATURE), BOX, acquire_text_font())
        self.assertIs(outcome.skip_reason, SkipReason.NO_VALUE)


if __name__ == "__main__":
    unittest.main()
