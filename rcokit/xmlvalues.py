"""Parsing and formatting of attribute values used in the RCO XML form."""

from __future__ import annotations

import logging
import math
import re
import struct
from collections.abc import Sequence
from dataclasses import dataclass

from .rcofile import RCO_NULL_PTR, RefType

log = logging.getLogger(__name__)

_MASK = 0xFFFFFFFF
_C_SPACE = " \t\n\v\f\r"

_INT_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_HEX_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?)(?:0[xX])?([0-9a-fA-F]+)")
_DEC_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?)([0-9]+)")
_FLOAT_RE = re.compile(
    r"[ \t\n\v\f\r]*([+-]?)(?:"
    r"(?P<hex>0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?)"
    r"|(?P<special>inf(?:inity)?|nan)"
    r"|(?P<dec>(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))",
    re.IGNORECASE,
)

_REF_PREFIXES = {
    "event": RefType.EVENT,
    "text": RefType.TEXT,
    "image": RefType.IMG,
    "model": RefType.MODEL,
    "font": RefType.FONT,
    "object2": RefType.OBJ2,
    "anim": RefType.ANIM,
    "object": RefType.OBJ,
}

_UNKNOWN_ATTRIB_KINDS = ("", "Int", "Float", "Event", "Image", "Model", "Font", "Object", "Ref")

DEFAULT_VERSION_ID = 0x71
PS3_VERSION_ID = 0x107


def _scan_int(text: str) -> int | None:
    """Integer prefix read the way ``%i`` reads it: decimal, 0x hex or 0 octal."""
    match = _INT_RE.match(text)
    if not match:
        return None
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits, 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return -value if sign == "-" else value


def _scan_hex(text: str) -> int | None:
    match = _HEX_RE.match(text)
    if not match:
        return None
    value = int(match.group(2), 16)
    return -value if match.group(1) == "-" else value


def _scan_decimal(text: str) -> int:
    match = _DEC_RE.match(text)
    if not match:
        return 0
    value = int(match.group(2))
    return -value if match.group(1) == "-" else value


def _scan_float(text: str) -> float | None:
    match = _FLOAT_RE.match(text)
    if not match:
        return None
    if match.group("hex"):
        value = float.fromhex(match.group("hex"))
    elif match.group("special"):
        value = float(match.group("special"))
    else:
        value = float(match.group("dec"))
    return -value if match.group(1) == "-" else value


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _float32_bits(value: float) -> int:
    return struct.unpack("<I", struct.pack("<f", _to_float32(value)))[0]


@dataclass
class ParsedRef:
    """A reference read from an attribute: its type, target label and raw pointer."""

    type: int = RefType.NONE
    name: str | None = None
    raw_ptr: int = RCO_NULL_PTR


def split_comma_list(text: str) -> list[str]:
    """Split a comma separated list; an empty string holds no items."""
    if not text:
        return []
    return text.split(",")


def expand_fname_to_fmt(name: str, kind: str) -> str:
    """Turn each ``*`` in a file name pattern into a ``%<kind>`` placeholder."""
    return name.replace("*", "%" + kind)


def _table_entries(table: Sequence[str]) -> list[str]:
    entries = []
    for entry in table:
        if not entry:
            break
        entries.append(entry)
    return entries


def text_to_int(text: str, table: Sequence[str]) -> int:
    """Index of ``text`` in a name table (case-insensitive), or the number of ``unknown<n>``."""
    if not text:
        raise ValueError("empty value")
    folded = text.lower()
    for index, entry in enumerate(_table_entries(table)):
        if entry.lower() == folded:
            return index
    if text.startswith("unknown"):
        value = _scan_int(text[len("unknown"):])
        if value is not None:
            return value & _MASK
    raise ValueError(f"Unrecognised value {text!r}")


def int_to_text(value: int, table: Sequence[str]) -> str:
    """Name of ``value`` in a name table, or ``unknown0x<hex>`` beyond its end."""
    entries = _table_entries(table)
    if 0 <= value < len(entries):
        return entries[value]
    return f"unknown0x{value & _MASK:x}"


def parse_value(text: str) -> int:
    """Raw 32-bit value of an object/anim attribute: ``0x`` hex, else float bits."""
    if not text:
        return 0
    if text.startswith("0x"):
        hex_value = _scan_hex(text[2:])
        if hex_value is not None:
            return hex_value & _MASK
    number = _scan_float(text)
    return _float32_bits(number if number is not None else 0.0)


def parse_ref(text: str) -> ParsedRef:
    """Parse ``nothing``, ``<kind>:<label>`` or ``unknown<n>:<pointer>``."""
    if text.lower() == "nothing":
        return ParsedRef()
    prefix, colon, rest = text.partition(":")
    if not colon:
        raise ValueError(f"Unable to parse reference {text!r}")
    ref_type = _REF_PREFIXES.get(prefix.lower())
    if ref_type is not None:
        return ParsedRef(ref_type, rest, RCO_NULL_PTR)
    if text.startswith("unknown"):
        value = _scan_int(text[len("unknown"):])
        if value is not None:
            return ParsedRef(value & _MASK, None, _scan_decimal(rest) & _MASK)
    raise ValueError(f"Unable to parse reference {text!r}")


def firmware_to_version_id(text: str) -> int:
    """RCO version id for a ``minFirmwareVer`` attribute value."""
    if not text:
        return 0
    if text.startswith("unknownId"):
        value = _scan_int(text[len("unknownId"):])
        if value is not None:
            return value & _MASK
    if text == "ps3":
        return PS3_VERSION_ID
    number = _scan_float(text)
    if number is None:
        if text.strip(_C_SPACE):
            log.warning("Unknown value for 'minFirmwareVer'.")
            return DEFAULT_VERSION_ID
        number = 0.0
    version = _to_float32(number)
    if version < 1.0:
        log.warning("Invalid value for 'minFirmwareVer'.")
        return DEFAULT_VERSION_ID
    for limit, version_id in ((1.5, 0x70), (2.6, 0x71), (2.7, 0x90), (2.8, 0x95), (3.5, 0x96)):
        if version < limit:
            return version_id
    if version <= 6.2:
        return 0x100
    log.warning("Unknown ID for firmware version '%f'.", version)
    return DEFAULT_VERSION_ID


def unknown_attrib_names(num: int) -> list[str]:
    """Attribute names tried, in order, for an unnamed value at position ``num``."""
    return [f"unknown{kind}{num}" for kind in _UNKNOWN_ATTRIB_KINDS]