"""Tests for Windows-1252 repair and header-declared transcoding."""

import pytest

from nntpclient import (
    DEFAULT_ENCODING,
    charset_to_encoding,
    decode_string,
    patch_windows1252,
    transcode_block,
)


class TestWindows1252:
    def test_bullet(self):
        assert decode_string(b"\x95bullet") == "•bullet"

    def test_euro_and_quotes(self):
        assert decode_string(b"\x80 \x93quoted\x94") == "€ “quoted”"

    @pytest.mark.parametrize("code", [0x81, 0x8D, 0x8F, 0x90, 0x9D])
    def test_undefined_slots_pass_through(self, code):
        assert decode_string(bytes([code])) == chr(code)

    def test_every_c1_character_is_replaced_or_kept(self):
        text = "".join(chr(c) for c in range(0x80, 0xA0))
        patched = patch_windows1252(text)
        assert len(patched) == 32
        kept = [c for c in patched if 0x80 <= ord(c) < 0xA0]
        assert [ord(c) for c in kept] == [0x81, 0x8D, 0x8F, 0x90, 0x9D]

    def test_other_latin1_untouched(self):
        assert decode_string("caf\xe9".encode("latin-1")) == "caf\xe9"

    def test_no_repair_for_other_encodings(self):
        assert decode_string("•".encode("utf-8"), "utf-8") == "•"


class TestCharsetToEncoding:
    @pytest.mark.parametrize(
        "charset, encoding",
        [
            ("UTF-8", "utf-8"),
            ("utf8", "utf-8"),
            ("utf-16le", "utf-16-le"),
            ("UTF16LE", "utf-16-le"),
            ("iso-8859-1", DEFAULT_ENCODING),
            ("latin1", DEFAULT_ENCODING),
            ("koi8-r", DEFAULT_ENCODING),
        ],
    )
    def test_mapping(self, charset, encoding):
        assert charset_to_encoding(charset) == encoding


class TestTranscodeBlock:
    def test_declared_utf8(self):
        block = (
            b"220 1 <a@b>\r\n"
            b"Content-Type: text/plain; charset=utf-8\r\n"
            b"\r\n" + "grüß •".encode("utf-8") + b"\r\n"
        )
        assert "grüß •" in transcode_block(block)

    def test_quoted_charset(self):
        block = (
            b"220 1 <a@b>\r\n"
            b'Content-Type: text/plain; charset="UTF-8"\r\n'
            b"\r\n" + "été".encode("utf-8") + b"\r\n"
        )
        assert "été" in transcode_block(block)

    def test_undeclared_uses_latin1_with_repair(self):
        block = b"220 1 <a@b>\r\nSubject: x\r\n\r\n\x95 caf\xe9\r\n"
        assert "• caf\xe9" in transcode_block(block)

    def test_unknown_charset_falls_back(self):
        block = (
            b"220 1 <a@b>\r\n"
            b"Content-Type: text/plain; charset=x-unknown\r\n"
            b"\r\n\x95\r\n"
        )
        assert transcode_block(block).endswith("•\r\n")

    def test_multipart_parts_decoded_independently(self):
        utf8_body = "über".encode("utf-8")
        block = (
            b"220 1 <a@b>\r\n"
            b"Content-Type: multipart/mixed;\r\n"
            b'\tboundary="XYZ"\r\n'
            b"\r\n"
            b"preamble\r\n"
            b"--XYZ\r\n"
            b"Content-Type: text/plain; charset=utf-8\r\n"
            b"\r\n" + utf8_body + b"\r\n"
            b"--XYZ\r\n"
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"\x95 \xfcber\r\n"
            b"--XYZ--\r\n"
        )
        text = transcode_block(block)
        assert "\r\nüber\r\n" in text
        assert "\r\n• über\r\n" in text
        assert text.count("--XYZ") == 3
