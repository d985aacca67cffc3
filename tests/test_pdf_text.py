import sys
import unittest
import zlib
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_tailor.parsing.pdf_text import (  # noqa: E402
    MAX_INFLATED_BYTES,
    _inflate_streams,
    decode_hex_string,
    extract_pdf_text,
    parse_cmap,
    scan_pdf_text,
)


def _pdf(content_stream: bytes, extra: bytes = b"") -> bytes:
    return (
        b"%PDF-1.4\n"
        + extra
        + b"4 0 obj\n<< /Length "
        + str(len(content_stream)).encode()
        + b" >>\nstream\n"
        + content_stream
        + b"\nendstream\nendobj\n%%EOF\n"
    )


class PdfScanTests(unittest.TestCase):
    def test_literal_tj_text_is_recovered(self):
        text = scan_pdf_text(_pdf(b"BT /F1 12 Tf 72 720 Td (Hello World) Tj ET"))
        self.assertEqual(text, "Hello World")

    def test_literal_escapes_are_unescaped(self):
        text = scan_pdf_text(_pdf(b"BT (Line\\(1\\)) Tj (caf\\351) Tj (a\\\\b) Tj ET"))
        self.assertIn("Line(1)", text)
        self.assertIn("café", text)
        self.assertIn("a\\b", text)

    def test_tj_array_joins_parts_and_spaces_wide_kerning(self):
        text = scan_pdf_text(_pdf(b"BT [(Hel) 20 (lo) -250 (there)] TJ ET"))
        self.assertIn("Hello there", text)

    def test_hex_string_uses_cmap_entries(self):
        cmap = b"/CIDInit begincmap\n2 beginbfchar\n<0001> <0048>\n<0002> <0069>\nendbfchar\nendcmap\n"
        text = scan_pdf_text(_pdf(b"BT <00010002> Tj ET", extra=cmap))
        self.assertIn("Hi", text)

    def test_hex_string_without_cmap_falls_back_to_ascii(self):
        self.assertEqual(decode_hex_string("48656C6C6F", {}), "Hello")

    def test_parse_cmap_skips_control_code_points(self):
        table = parse_cmap("beginbfchar <01> <0009> <02> <0041> <0a> <10000> endbfchar")
        self.assertEqual(table, {"02": "A"})

    def test_camel_case_joins_are_split(self):
        text = scan_pdf_text(_pdf(b"BT (fooBar) Tj ET"))
        self.assertEqual(text, "foo Bar")

    def test_flate_streams_are_inflated_before_scanning(self):
        compressed = zlib.compress(b"BT (Compressed words) Tj ET")
        pdf = (
            b"%PDF-1.4\n5 0 obj\n<< /Length "
            + str(len(compressed)).encode()
            + b" /Filter /FlateDecode >>\nstream\n"
            + compressed
            + b"\nendstream\nendobj\n"
        )
        self.assertIn("Compressed words", scan_pdf_text(pdf))

    def test_bare_literals_used_when_few_text_objects(self):
        text = scan_pdf_text(b"%PDF-1.4\n<< /Title (Quarterly Report) >>\n")
        self.assertIn("Quarterly Report", text)

    def test_stream_words_second_chance_skips_operators(self):
        text = scan_pdf_text(_pdf(b"q 1 0 0 1 Td Kubernetes internationalization BT ET Q"))
        self.assertIn("Kubernetes", text)
        self.assertIn("internationalization", text)
        self.assertNotIn("BT", text.split())

    def test_stream_words_keep_prose_that_matches_pdf_names(self):
        text = scan_pdf_text(_pdf(b"q Image Processing Page Layout Font Pairing Q"))
        for word in ("Image", "Page", "Font"):
            self.assertIn(word, text.split())

    def test_unreadable_bytes_yield_empty_text(self):
        self.assertEqual(scan_pdf_text(b"\x00\x01\x02\x03"), "")


def _flate_pdf(*payloads: bytes) -> bytes:
    objects = b""
    for number, payload in enumerate(payloads, start=5):
        compressed = zlib.compress(payload, 9)
        objects += (
            str(number).encode()
            + b" 0 obj\n<< /Length "
            + str(len(compressed)).encode()
            + b" /Filter /FlateDecode >>\nstream\n"
            + compressed
            + b"\nendstream\nendobj\n"
        )
    return b"%PDF-1.4\n" + objects


class PdfInflateLimitTests(unittest.TestCase):
    def test_zero_filled_stream_is_cut_at_budget(self):
        pdf = _flate_pdf(b"\x00" * (32 * 1024 * 1024))
        self.assertLess(len(pdf), 1024 * 1024)

        inflated = _inflate_streams(pdf)
        self.assertLessEqual(sum(len(chunk) for chunk in inflated), MAX_INFLATED_BYTES)

    def test_budget_is_shared_across_streams(self):
        pdf = _flate_pdf(b"\x00" * 4096, b"\x00" * 4096, b"BT (Late text) Tj ET")
        inflated = _inflate_streams(pdf, budget=6000)
        self.assertEqual([len(chunk) for chunk in inflated], [4096, 1904])

    def test_scan_stays_readable_next_to_a_large_stream(self):
        pdf = _flate_pdf(b"BT (Visible heading) Tj ET", b"\x00" * (16 * 1024 * 1024))
        self.assertIn("Visible heading", scan_pdf_text(pdf))


class PdfExtractTests(unittest.TestCase):
    def test_synthetic_pdf_falls_back_to_scanner(self):
        text, extractor, warnings = extract_pdf_text(_pdf(b"BT (Hello World) Tj ET"))
        self.assertEqual(extractor, "pdf-scan")
        self.assertIn("Hello World", text)
        self.assertTrue(warnings)

    def test_scanner_only_mode_skips_library(self):
        text, extractor, warnings = extract_pdf_text(_pdf(b"BT (Hello World) Tj ET"), library_first=False)
        self.assertEqual((text, extractor, warnings), ("Hello World", "pdf-scan", []))


if __name__ == "__main__":
    unittest.main()
