"""Text language data: reading ``TextLang`` XML documents and per-entry text files."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import BinaryIO, Union

from .labels import LabelTable
from .rcofile import RCO_NULL_PTR

log = logging.getLogger(__name__)

_FMT_UTF8 = 0
_FMT_UTF16 = 1
_FMT_UTF32 = 2

_BOM_CHAR = "\ufeff"

# Checked in this order: the UTF-32 LE mark begins with the UTF-16 LE one.
_BOMS = (
    (b"\xff\xfe\x00\x00", "utf-32-le"),
    (b"\x00\x00\xfe\xff", "utf-32-be"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
    (b"\xef\xbb\xbf", "utf-8"),
)

Source = Union[str, "os.PathLike[str]", bytes, bytearray, BinaryIO]


def _align4(value: int) -> int:
    return (value + 3) & ~3


def _codec(text_format: int, big_endian: bool) -> tuple[str, int]:
    """Python codec name and character width for an RCO text format."""
    if text_format == _FMT_UTF8:
        return "utf-8", 1
    if text_format == _FMT_UTF32:
        return ("utf-32-be" if big_endian else "utf-32-le"), 4
    return ("utf-16-be" if big_endian else "utf-16-le"), 2


@dataclass
class TextLangData:
    """Text entries of one language.

    ``entries`` holds ``(label_offset, length, offset)`` for each entry, where
    ``length`` counts the terminating NUL and ``offset`` points into ``data``.
    """

    entries: list[tuple[int, int, int]] = field(default_factory=list)
    data: bytes = b""


def _parse_root(source: Source) -> ET.Element:
    try:
        if isinstance(source, (bytes, bytearray)):
            return ET.fromstring(bytes(source))
        return ET.parse(source).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"Can't parse XML document: {exc}") from None


def parse_text_xml(
    source: Source, text_format: int, labels: LabelTable, big_endian: bool
) -> TextLangData:
    """Read a ``TextLang`` document, adding entry names to ``labels``.

    Entries with no name are warned about; they still count towards the
    number of entries and are left as zeroed entries at the end.
    """
    root = _parse_root(source)
    if root.tag != "TextLang":
        raise ValueError("Invalid XML document: root element is not TextLang.")

    texts = [child for child in root if child.tag == "Text"]
    if not texts:
        return TextLangData()

    codec, width = _codec(text_format, big_endian)
    entries: list[tuple[int, int, int]] = []
    buffer = bytearray()

    for elem in texts:
        name = elem.get("name")
        if name is None:
            log.warning("No name specified for Text!")
            continue
        label_offset = labels.add(name)
        length = 0
        offset = RCO_NULL_PTR
        content = elem.text
        if content:
            if content.startswith(_BOM_CHAR):
                content = content[1:]
            encoded = content.encode(codec, "surrogatepass")
            length = len(encoded) + width
            if length > 2:
                offset = len(buffer)
                buffer += encoded
                buffer += b"\0" * (_align4(length) - len(encoded))
            else:
                length = 0
        entries.append((label_offset, length, offset))

    entries.extend((0, 0, 0) for _ in range(len(texts) - len(entries)))
    return TextLangData(entries, bytes(buffer))


def read_text_file(
    path: Union[str, "os.PathLike[str]"], text_format: int, big_endian: bool
) -> tuple[bytes, int]:
    """Read one text entry from a file, converting it to the target format.

    A leading byte order mark selects the source encoding; without one the
    file is taken to be in the target format already. Returns the text with
    its terminating NUL and zero padding to a 4-byte boundary, and the length
    of the text without the terminator. An empty file gives ``(b"", 0)``.
    """
    with open(path, "rb") as stream:
        raw = stream.read()
    if not raw:
        return b"", 0

    codec, width = _codec(text_format, big_endian)
    for bom, source_codec in _BOMS:
        if raw.startswith(bom):
            body = raw[len(bom):]
            if source_codec != codec:
                body = body.decode(source_codec, "surrogatepass").encode(
                    codec, "surrogatepass"
                )
            break
    else:
        body = raw

    length = len(body)
    padded = body + b"\0" * (_align4(length + width) - length)
    return padded, length