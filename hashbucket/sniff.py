# -*- coding: utf-8 -*-
"""Content type detection from the leading bytes of a file."""

from .utils import SNIFF_LEN

TEXT_UTF8 = "text/plain; charset=utf-8"
OCTET_STREAM = "application/octet-stream"

# (signature, content type) pairs matched against the start of the data.
_PREFIXES = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_UTF8),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"OggS\x00", "application/ogg"),
    (b"ID3", "audio/mpeg"),
    (b"\x1aE\xdf\xa3", "video/webm"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed"),
    (b"\x00asm", "application/wasm"),
)

# RIFF containers carry their format at offset 8.
_RIFF = (
    (b"WEBPVP", "image/webp"),
    (b"WAVE", "audio/wave"),
    (b"AVI ", "video/avi"),
)

_HTML_TAGS = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

_WHITESPACE = b"\t\n\x0c\r "

# Bytes that never occur in plain text.
_BINARY = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)


def detect_content_type(data: bytes) -> str:
    """Return the MIME type of `data`, considering at most its first 512
    bytes. Unrecognized binary data is ``application/octet-stream``.
    """
    data = bytes(data[:SNIFF_LEN])

    for signature, content_type in _PREFIXES:
        if data.startswith(signature):
            return content_type

    if data.startswith(b"RIFF") and len(data) >= 12:
        for signature, content_type in _RIFF:
            if data[8:].startswith(signature):
                return content_type

    if data[4:8] == b"ftyp":
        return _sniff_mp4(data)

    text = data.lstrip(_WHITESPACE)
    upper = text.upper()
    for tag in _HTML_TAGS:
        if upper.startswith(tag):
            rest = text[len(tag) : len(tag) + 1]
            if rest in (b" ", b">") or tag == b"<!--":
                return "text/html; charset=utf-8"
    if text.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    if any(byte in _BINARY for byte in data):
        return OCTET_STREAM
    return TEXT_UTF8


def _sniff_mp4(data):
    brand = data[8:11]
    if brand == b"qt ":
        return "video/quicktime"
    if brand == b"M4A":
        return "audio/mp4"
    if data[8:12] in (b"avif", b"avis"):
        return "image/avif"
    if data[8:12] in (b"heic", b"heix", b"mif1"):
        return "image/heic"
    return "video/mp4"
