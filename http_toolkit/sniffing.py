"""Content type detection from leading bytes.

Client supplied Content-Type headers are never consulted here.
"""
from typing import Optional

SNIFF_LEN = 512

OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN = "text/plain; charset=utf-8"

WHITESPACE = b"\t\n\x0c\r "
TAG_TERMINATORS = b" >"

HTML_TAGS = (
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

FILE_SIGNATURES = (
    ("application/pdf", b"%PDF-"),
    ("application/postscript", b"%!PS-Adobe-"),
    ("text/plain; charset=utf-16be", b"\xfe\xff"),
    ("text/plain; charset=utf-16le", b"\xff\xfe"),
    ("text/plain; charset=utf-8", b"\xef\xbb\xbf"),
    ("image/gif", b"GIF87a"),
    ("image/gif", b"GIF89a"),
    ("image/png", b"\x89PNG\r\n\x1a\n"),
    ("image/jpeg", b"\xff\xd8\xff"),
    ("image/bmp", b"BM"),
    ("image/x-icon", b"\x00\x00\x01\x00"),
    ("image/x-icon", b"\x00\x00\x02\x00"),
    ("audio/basic", b".snd\x01"),
    ("audio/mpeg", b"ID3"),
    ("application/ogg", b"OggS\x00"),
    ("audio/midi", b"MThd\x00\x00\x00\x06"),
    ("video/webm", b"\x1a\x45\xdf\xa3"),
    ("font/ttf", b"\x00\x01\x00\x00"),
    ("font/otf", b"OTTO"),
    ("font/collection", b"ttcf"),
    ("font/woff", b"wOFF"),
    ("font/woff2", b"wOF2"),
    ("application/x-gzip", b"\x1f\x8b\x08"),
    ("application/zip", b"PK\x03\x04"),
    ("application/x-rar-compressed", b"Rar!\x1a\x07\x00"),
    ("application/x-rar-compressed", b"Rar!\x1a\x07\x01\x00"),
    ("application/wasm", b"\x00asm\x01\x00\x00\x00"),
)

# (mime, container tag, form type at offset 8)
RIFF_SIGNATURES = (
    ("image/webp", b"RIFF", b"WEBPVP"),
    ("audio/wave", b"RIFF", b"WAVE"),
    ("video/avi", b"RIFF", b"AVI "),
    ("audio/aiff", b"FORM", b"AIFF"),
)


def _is_binary_byte(byte: int) -> bool:
    return byte <= 0x08 or byte == 0x0B or 0x0E <= byte <= 0x1A or 0x1C <= byte <= 0x1F


def _detect_markup(data: bytes) -> Optional[str]:
    stripped = data.lstrip(WHITESPACE)
    upper = stripped.upper()
    for tag in HTML_TAGS:
        if upper.startswith(tag) and len(stripped) > len(tag) and stripped[len(tag)] in TAG_TERMINATORS:
            return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    return None


def _detect_mime(data: bytes) -> Optional[str]:
    for mime, signature in FILE_SIGNATURES:
        if data.startswith(signature):
            return mime
    for mime, container, form in RIFF_SIGNATURES:
        if data.startswith(container) and data[8 : 8 + len(form)] == form:
            return mime
    if len(data) >= 12 and data[4:8] == b"ftyp":
        box_size = int.from_bytes(data[:4], "big")
        if box_size % 4 == 0 and box_size <= len(data):
            return "video/mp4"
    return None


def sniff_content_type(data: bytes) -> str:
    """Best guess MIME type for the first SNIFF_LEN bytes of `data`."""
    prefix = data[:SNIFF_LEN]

    mime = _detect_markup(prefix) or _detect_mime(prefix)
    if mime:
        return mime

    if any(_is_binary_byte(byte) for byte in prefix):
        return OCTET_STREAM
    return TEXT_PLAIN


async def sniff_stream(stream) -> tuple[str, bytes]:
    """Read up to SNIFF_LEN bytes from an async file-like object.

    Returns the sniffed type together with the bytes consumed, which the caller
    is responsible for writing out ahead of the rest of the stream.
    """
    prefix = b""
    while len(prefix) < SNIFF_LEN:
        chunk = await stream.read(SNIFF_LEN - len(prefix))
        if not chunk:
            break
        prefix += chunk
    return sniff_content_type(prefix), prefix


def base_type(mime: Optional[str]) -> Optional[str]:
    if not mime:
        return None
    normalized = mime.split(";")[0].strip().lower()
    return normalized or None
