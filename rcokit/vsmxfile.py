"""VSMX script container: opcodes, code groups and the binary file layout."""

from __future__ import annotations

import logging
import re
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO

log = logging.getLogger(__name__)

VSMX_SIGNATURE = 0x584D5356  # "VSMX"
VSMX_VERSION = 0x00010000  # PSP RCOs
JSX_VERSION = 0x00020000  # PS3 .jsx files
HEADER_SIZE = 0x34
GROUP_SIZE = 8

_HEADER = struct.Struct("<13I")
_GROUP = struct.Struct("<II")
_FLOAT_BITS = struct.Struct("<f")
_U32 = struct.Struct("<I")


class VsmxError(ValueError):
    """Raised for malformed VSMX data or assembly."""


class VsmxOp(IntEnum):
    NOTHING = 0x0
    OPERATOR_ASSIGN = 0x1
    OPERATOR_ADD = 0x2
    OPERATOR_SUBTRACT = 0x3
    OPERATOR_MULTIPLY = 0x4
    OPERATOR_DIVIDE = 0x5
    OPERATOR_MOD = 0x6
    OPERATOR_POSITIVE = 0x7
    OPERATOR_NEGATE = 0x8
    OPERATOR_NOT = 0x9
    P_INCREMENT = 0xA
    P_DECREMENT = 0xB
    INCREMENT = 0xC
    DECREMENT = 0xD
    OPERATOR_EQUAL = 0xE
    OPERATOR_NOT_EQUAL = 0xF
    OPERATOR_IDENTITY = 0x10
    OPERATOR_NON_IDENTITY = 0x11
    OPERATOR_LT = 0x12
    OPERATOR_LTE = 0x13
    OPERATOR_GTE = 0x14
    OPERATOR_GT = 0x15
    OPERATOR_TYPEOF = 0x18
    OPERATOR_B_AND = 0x19
    OPERATOR_B_XOR = 0x1A
    OPERATOR_B_OR = 0x1B
    OPERATOR_B_NOT = 0x1C
    OPERATOR_LSHIFT = 0x1D
    OPERATOR_RSHIFT = 0x1E
    OPERATOR_URSHIFT = 0x1F
    STACK_PUSH = 0x20
    END_STMT = 0x22
    CONST_NULL = 0x23
    CONST_EMPTYARRAY = 0x24
    CONST_BOOL = 0x25
    CONST_INT = 0x26
    CONST_FLOAT = 0x27
    CONST_STRING = 0x28
    CONST_OBJECT = 0x29
    FUNCTION = 0x2A
    ARRAY = 0x2B
    THIS = 0x2C
    UNNAMED_VAR = 0x2D
    VARIABLE = 0x2E
    PROPERTY = 0x2F
    METHOD = 0x30
    UNK_31 = 0x31
    UNSET = 0x32
    OBJ_ADD_ATTR = 0x33
    ARRAY_INDEX = 0x34
    ARRAY_INDEX_ASSIGN = 0x36
    ARRAY_ELEM = 0x38
    SECT_START = 0x39
    JUMP_TRUE = 0x3A
    JUMP_FALSE = 0x3B
    CALL_FUNC = 0x3C
    CALL_METHOD = 0x3D
    CALL_NEW = 0x3E
    RETURN = 0x3F
    END = 0x45
    DEBUG_FILE = 0x46
    DEBUG_LINE = 0x47
    MAKE_FLOAT_ARRAY = 0x49


OP_NAMES: tuple[str, ...] = (
    "UNKNOWN_0", "ASSIGN", "ADD", "SUBTRACT", "MULTIPLY", "DIVIDE", "MODULUS",
    "POSITIVE", "NEGATE", "NOT", "PRE_INCREMENT", "PRE_DECREMENT", "INCREMENT",
    "DECREMENT", "TEST_EQUAL", "TEST_NOT_EQUAL", "TEST_IDENTITY",
    "TEST_NON_IDENTITY", "TEST_LESS_THAN", "TEST_LESS_EQUAL_THAN",
    "TEST_MORE_EQUAL_THAN", "TEST_MORE_THAN", "UNKNOWN_16", "UNKNOWN_17",
    "TYPEOF", "BINARY_AND", "BINARY_XOR", "BINARY_OR", "BINARY_NOT", "LSHIFT",
    "RSHIFT", "UNSIGNED_RSHIFT", "STACK_PUSH", "UNKNOWN_21", "END_STATEMENT",
    "CONST_NULL", "CONST_EMPTY_ARRAY", "CONST_BOOL", "CONST_INT", "CONST_FLOAT",
    "CONST_STRING", "CONST_OBJECT", "FUNCTION", "CONST_ARRAY", "THIS_OBJECT",
    "UNNAMED_VARIABLE", "NAME", "PROPERTY", "METHOD", "SET", "UNSET",
    "OBJECT_ADD_ATTRIBUTE", "ARRAY_INDEX", "UNKNOWN_35", "ARRAY_INDEX_ASSIGN",
    "UNKNOWN_37", "ARRAY_PUSH", "JUMP", "JUMP_IF_TRUE", "JUMP_IF_FALSE",
    "CALL_FUNCTION", "CALL_METHOD", "CALL_NEW", "RETURN", "UNKNOWN_40",
    "UNKNOWN_41", "UNKNOWN_42", "UNKNOWN_43", "UNKNOWN_44", "END_SCRIPT",
    "DEBUG_FILE", "DEBUG_LINE", "UNKNOWN_48", "MAKE_FLOAT_ARRAY",
)

_UNKNOWN_RE = re.compile(r"UNKNOWN_(?:0[xX])?([0-9a-fA-F]+)")
_NAME_LOOKUP = {name.lower(): num for num, name in enumerate(OP_NAMES)}


def op_name(op_id: int) -> str:
    """Mnemonic for an opcode id (only the low byte selects the operation)."""
    low = op_id & 0xFF
    if low < len(OP_NAMES):
        return OP_NAMES[low]
    return f"UNKNOWN_{op_id:x}"


def op_from_name(name: str) -> int:
    """Opcode number for a mnemonic; ``UNKNOWN_<hex>`` gives the number directly."""
    match = _UNKNOWN_RE.match(name)
    if match:
        return int(match.group(1), 16)
    try:
        return _NAME_LOOKUP[name.lower()]
    except KeyError:
        raise VsmxError(f"Invalid operation {name!r}") from None


@dataclass(frozen=True)
class VsmxGroup:
    """One code group: an opcode id and its 32-bit argument."""

    id: int
    value: int = 0

    def as_float(self) -> float:
        """The argument reinterpreted as a 32-bit float."""
        return _FLOAT_BITS.unpack(_U32.pack(self.value & 0xFFFFFFFF))[0]

    @classmethod
    def from_float(cls, op_id: int, value: float) -> VsmxGroup:
        """A group whose argument holds the bits of a 32-bit float."""
        return cls(op_id, _U32.unpack(_FLOAT_BITS.pack(value))[0])


def _split_pool(raw: str, expected: int, kind: str) -> list[str]:
    if raw.endswith("\0"):
        raw = raw[:-1]
    parts = raw.split("\0")
    if len(parts) > expected:
        raise VsmxError(
            f"Number of {kind} entries found exceeds number specified in header!"
        )
    if len(parts) < expected:
        raise VsmxError(
            f"Number of {kind} entries found is less than number specified in header!"
        )
    return parts


def _read_section(
    data: bytes, offset: int, length: int, entries: int, pos: int, kind: str, wide: bool
) -> tuple[list[str], int]:
    if not length and not entries:
        return [], pos
    if offset != pos:
        log.warning("Skipping range 0x%x-0x%x", pos, offset)
    if not length:
        raise VsmxError(f"Number of {kind} entries > 1 but length of data is 0!")
    if not entries:
        raise VsmxError(f"Number of {kind} entries = 0 but length of data is > 0!")
    width = 2 if wide else 1
    if length % width:
        raise VsmxError(f"Size of {kind} not aligned to {width} byte(s).")
    chunk = data[offset:offset + length]
    if len(chunk) != length:
        raise VsmxError(f"VSMX data truncated in {kind} section.")
    raw = chunk.decode("utf-16-le", "surrogatepass") if wide else chunk.decode("latin-1")
    return _split_pool(raw, entries, kind), offset + length


def _pool_bytes(strings: list[str], wide: bool) -> bytes:
    joined = "".join(s + "\0" for s in strings)
    return joined.encode("utf-16-le", "surrogatepass") if wide else joined.encode("latin-1")


@dataclass
class VsmxMem:
    """A VSMX program: code groups plus its text, property and name pools."""

    code: list[VsmxGroup] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)
    props: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> VsmxMem:
        """Parse a whole VSMX file image."""
        if len(data) < HEADER_SIZE:
            raise VsmxError("Not a valid VSMX file.")
        (sig, ver, code_off, code_len, text_off, text_len, text_n,
         prop_off, prop_len, prop_n, names_off, names_len, names_n) = _HEADER.unpack_from(data)
        if sig != VSMX_SIGNATURE or ver not in (VSMX_VERSION, JSX_VERSION):
            raise VsmxError("Not a valid VSMX file.")
        if code_off != HEADER_SIZE:
            log.warning("Skipping range 0x%x-0x%x", HEADER_SIZE, code_off)
        if code_len % GROUP_SIZE:
            raise VsmxError("Code size not aligned to 8 bytes.")
        code_bytes = data[code_off:code_off + code_len]
        if len(code_bytes) != code_len:
            raise VsmxError("VSMX data truncated in code section.")
        code = [VsmxGroup(op, val) for op, val in _GROUP.iter_unpack(code_bytes)]
        pos = code_off + code_len
        texts, pos = _read_section(data, text_off, text_len, text_n, pos, "text", True)
        props, pos = _read_section(data, prop_off, prop_len, prop_n, pos, "properties", True)
        names, pos = _read_section(data, names_off, names_len, names_n, pos, "names", False)
        return cls(code, texts, props, names)

    @classmethod
    def read(cls, stream: BinaryIO) -> VsmxMem:
        """Read and parse a VSMX file from a binary stream."""
        return cls.from_bytes(stream.read())

    def to_bytes(self) -> bytes:
        """Serialise to the VSMX file layout."""
        code = b"".join(_GROUP.pack(g.id & 0xFFFFFFFF, g.value & 0xFFFFFFFF) for g in self.code)
        text = _pool_bytes(self.texts, True)
        prop = _pool_bytes(self.props, True)
        names = _pool_bytes(self.names, False)
        pos = HEADER_SIZE
        code_off = pos
        pos += len(code)
        text_off = pos
        pos += len(text)
        prop_off = pos
        pos += len(prop)
        names_off = pos
        header = _HEADER.pack(
            VSMX_SIGNATURE, VSMX_VERSION, code_off, len(code),
            text_off, len(text), len(self.texts),
            prop_off, len(prop), len(self.props),
            names_off, len(names), len(self.names),
        )
        return header + code + text + prop + names

    def write(self, stream: BinaryIO) -> None:
        """Write the serialised program to a binary stream."""
        stream.write(self.to_bytes())