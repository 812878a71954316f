"""On-disk records and constants of the RCO resource file format."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

RCO_NULL_PTR = 0xFFFFFFFF
RCO_SIGNATURE = 0x46525000  # ".PRF"


class TableType(IntEnum):
    MAIN = 1
    VSMX = 2
    TEXT = 3
    IMG = 4
    MODEL = 5
    SOUND = 6
    FONT = 7
    OBJ = 8
    ANIM = 9


class TextLang(IntEnum):
    JAPANESE = 0x0
    ENGLISH = 0x1
    FRENCH = 0x2
    SPANISH = 0x3
    GERMAN = 0x4
    ITALIAN = 0x5
    DUTCH = 0x6
    PORTUGESE = 0x7
    RUSSIAN = 0x8
    KOREAN = 0x9
    CHINESE_TRADITIONAL = 0xA
    CHINESE_SIMPLIFIED = 0xB
    FINNISH = 0xC
    SWEDISH = 0xD
    DANISH = 0xE
    NORWEGIAN = 0xF


class TextFormat(IntEnum):
    UTF8 = 0x0
    UTF16 = 0x1
    UTF32 = 0x2


class DataCompression(IntEnum):
    NONE = 0x0
    ZLIB = 0x1
    RLZ = 0x2


class ImageFormat(IntEnum):
    PNG = 0x0
    JPEG = 0x1
    TIFF = 0x2
    GIF = 0x3
    BMP = 0x4
    GIM = 0x5


class ModelFormat(IntEnum):
    GMO = 0x0


class SoundFormat(IntEnum):
    VAG = 0x1


class ObjType(IntEnum):
    PAGE = 0x1
    PLANE = 0x2
    BUTTON = 0x3
    XMENU = 0x4
    XMLIST = 0x5
    XLIST = 0x6
    PROGRESS = 0x7
    SCROLL = 0x8
    MLIST = 0x9
    MITEM = 0xA
    XITEM = 0xC
    TEXT = 0xD
    MODEL = 0xE
    SPIN = 0xF
    ACTION = 0x10
    ITEMSPIN = 0x11
    GROUP = 0x12
    LLIST = 0x13
    LITEM = 0x14
    EDIT = 0x15
    CLOCK = 0x16
    ILIST = 0x17
    IITEM = 0x18
    ICON = 0x19
    UBUTTON = 0x1A


class RefType(IntEnum):
    EVENT = 0x400
    TEXT = 0x401
    IMG = 0x402
    MODEL = 0x403
    FONT = 0x405
    OBJ2 = 0x407
    ANIM = 0x408
    OBJ = 0x409
    NONE = 0xFFFF


class AnimType(IntEnum):
    POS = 0x2
    COLOUR = 0x3
    ROTATE = 0x4
    SCALE = 0x5
    ALPHA = 0x6
    DELAY = 0x7
    EVENT = 0x8
    LOCK = 0x9
    UNLOCK = 0xA
    UNKNOWN_0B = 0xB


def _struct(fmt: str, big_endian: bool) -> struct.Struct:
    return struct.Struct((">" if big_endian else "<") + fmt)


def _unpack(fmt: str, data: bytes, big_endian: bool, offset: int = 0) -> tuple[int, ...]:
    layout = _struct(fmt, big_endian)
    if len(data) < offset + layout.size:
        raise ValueError(f"need {offset + layout.size} bytes, got {len(data)}")
    return layout.unpack_from(data, offset)


def _pack(fmt: str, big_endian: bool, *values: int) -> bytes:
    return _struct(fmt, big_endian).pack(*values)


_PRF_FIELDS = (
    "signature", "version", "null", "compression",
    "p_main_table", "p_vsmx_table", "p_text_table", "p_sound_table",
    "p_model_table", "p_img_table", "p_unknown", "p_font_table",
    "p_obj_table", "p_anim_table",
    "p_text_data", "l_text_data", "p_label_data", "l_label_data",
    "p_event_data", "l_event_data",
    "p_text_ptrs", "l_text_ptrs", "p_img_ptrs", "l_img_ptrs",
    "p_model_ptrs", "l_model_ptrs", "p_sound_ptrs", "l_sound_ptrs",
    "p_obj_ptrs", "l_obj_ptrs", "p_anim_ptrs", "l_anim_ptrs",
    "p_img_data", "l_img_data", "p_sound_data", "l_sound_data",
    "p_model_data", "l_model_data",
)


@dataclass
class PRFHeader:
    """The main RCO file header."""

    FORMAT: ClassVar[str] = "41I"
    SIZE: ClassVar[int] = 41 * 4

    signature: int = RCO_SIGNATURE
    version: int = 0x71
    null: int = 0
    compression: int = 0
    p_main_table: int = RCO_NULL_PTR
    p_vsmx_table: int = RCO_NULL_PTR
    p_text_table: int = RCO_NULL_PTR
    p_sound_table: int = RCO_NULL_PTR
    p_model_table: int = RCO_NULL_PTR
    p_img_table: int = RCO_NULL_PTR
    p_unknown: int = RCO_NULL_PTR
    p_font_table: int = RCO_NULL_PTR
    p_obj_table: int = RCO_NULL_PTR
    p_anim_table: int = RCO_NULL_PTR
    p_text_data: int = RCO_NULL_PTR
    l_text_data: int = 0
    p_label_data: int = RCO_NULL_PTR
    l_label_data: int = 0
    p_event_data: int = RCO_NULL_PTR
    l_event_data: int = 0
    p_text_ptrs: int = RCO_NULL_PTR
    l_text_ptrs: int = 0
    p_img_ptrs: int = RCO_NULL_PTR
    l_img_ptrs: int = 0
    p_model_ptrs: int = RCO_NULL_PTR
    l_model_ptrs: int = 0
    p_sound_ptrs: int = RCO_NULL_PTR
    l_sound_ptrs: int = 0
    p_obj_ptrs: int = RCO_NULL_PTR
    l_obj_ptrs: int = 0
    p_anim_ptrs: int = RCO_NULL_PTR
    l_anim_ptrs: int = 0
    p_img_data: int = RCO_NULL_PTR
    l_img_data: int = 0
    p_sound_data: int = RCO_NULL_PTR
    l_sound_data: int = 0
    p_model_data: int = RCO_NULL_PTR
    l_model_data: int = 0
    unknown: tuple[int, int, int] = (RCO_NULL_PTR, RCO_NULL_PTR, RCO_NULL_PTR)

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> PRFHeader:
        values = _unpack(cls.FORMAT, data, big_endian)
        named = dict(zip(_PRF_FIELDS, values))
        return cls(**named, unknown=tuple(values[len(_PRF_FIELDS):]))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        values = [getattr(self, name) for name in _PRF_FIELDS]
        return _pack(self.FORMAT, big_endian, *values, *self.unknown)


@dataclass
class RCOEntryHeader:
    """The fixed header that starts every entry of the RCO tree."""

    FORMAT: ClassVar[str] = "HH9I"
    SIZE: ClassVar[int] = 0x28

    type_id: int = 0
    blank: int = 0
    label_offset: int = RCO_NULL_PTR
    e_head_size: int = 0
    entry_size: int = 0x28
    num_subentries: int = 0
    next_entry_offset: int = 0
    prev_entry_offset: int = 0
    parent_tbl_offset: int = 0
    blanks: tuple[int, int] = (0, 0)

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> RCOEntryHeader:
        v = _unpack(cls.FORMAT, data, big_endian)
        return cls(*v[:9], blanks=(v[9], v[10]))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        return _pack(
            self.FORMAT, big_endian, self.type_id, self.blank, self.label_offset,
            self.e_head_size, self.entry_size, self.num_subentries,
            self.next_entry_offset, self.prev_entry_offset,
            self.parent_tbl_offset, *self.blanks,
        )


@dataclass
class TextEntryHeader:
    """Language, encoding and index count of a text entry."""

    FORMAT: ClassVar[str] = "HHI"
    SIZE: ClassVar[int] = 8

    lang: int = TextLang.JAPANESE
    format: int = TextFormat.UTF16
    num_indexes: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> TextEntryHeader:
        return cls(*_unpack(cls.FORMAT, data, big_endian))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        return _pack(self.FORMAT, big_endian, self.lang, self.format, self.num_indexes)


@dataclass
class TextIndex:
    """Label, length and data offset of one string of a text entry."""

    FORMAT: ClassVar[str] = "3I"
    SIZE: ClassVar[int] = 12

    label_offset: int = RCO_NULL_PTR
    length: int = 0
    offset: int = RCO_NULL_PTR

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> TextIndex:
        return cls(*_unpack(cls.FORMAT, data, big_endian))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        return _pack(self.FORMAT, big_endian, self.label_offset, self.length, self.offset)


@dataclass
class ImgModelEntry:
    """Image or model entry; the unpacked size exists only when compressed."""

    format: int = 0
    compression: int = DataCompression.NONE
    size_packed: int = 0
    offset: int = 0
    size_unpacked: int | None = None
    something: int = 1  # PS3 only

    @property
    def is_compressed(self) -> bool:
        return (self.compression & 0xFF) != DataCompression.NONE

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False, ps3: bool = False) -> ImgModelEntry:
        fmt, compression, size_packed, offset = _unpack("HHII", data, big_endian)
        pos = 12
        something = 1
        if ps3:
            (something,) = _unpack("I", data, big_endian, pos)
            pos += 4
        entry = cls(fmt, compression, size_packed, offset, None, something)
        if entry.is_compressed:
            (entry.size_unpacked,) = _unpack("I", data, big_endian, pos)
        return entry

    def to_bytes(self, big_endian: bool = False, ps3: bool = False) -> bytes:
        out = _pack("HHII", big_endian, self.format, self.compression,
                    self.size_packed, self.offset)
        if ps3:
            out += _pack("I", big_endian, self.something)
        if self.size_unpacked is not None:
            out += _pack("I", big_endian, self.size_unpacked)
        return out


@dataclass
class SoundEntryHeader:
    """Sound entry header; per-channel size/offset pairs follow it."""

    FORMAT: ClassVar[str] = "HHII"
    SIZE: ClassVar[int] = 12

    format: int = SoundFormat.VAG
    channels: int = 1
    size_total: int = 0
    offset: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> SoundEntryHeader:
        return cls(*_unpack(cls.FORMAT, data, big_endian))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        return _pack(self.FORMAT, big_endian, self.format, self.channels,
                     self.size_total, self.offset)


@dataclass
class FontEntry:
    """Font entry."""

    FORMAT: ClassVar[str] = "HHII"
    SIZE: ClassVar[int] = 12

    format: int = 1
    compression: int = 0
    unknown: int = 0
    unknown2: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> FontEntry:
        return cls(*_unpack(cls.FORMAT, data, big_endian))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        return _pack(self.FORMAT, big_endian, self.format, self.compression,
                     self.unknown, self.unknown2)


@dataclass
class Reference:
    """A typed reference from an object or animation to another resource."""

    FORMAT: ClassVar[str] = "II"
    SIZE: ClassVar[int] = 8

    type: int = RefType.NONE
    ptr: int = RCO_NULL_PTR

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> Reference:
        return cls(*_unpack(cls.FORMAT, data, big_endian))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        return _pack(self.FORMAT, big_endian, self.type, self.ptr)


@dataclass
class HeaderComprInfo:
    """Sizes of the compressed header tables."""

    FORMAT: ClassVar[str] = "3I"
    SIZE: ClassVar[int] = 12

    len_packed: int = 0
    len_unpacked: int = 0
    len_longest_text: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> HeaderComprInfo:
        return cls(*_unpack(cls.FORMAT, data, big_endian))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        return _pack(self.FORMAT, big_endian, self.len_packed,
                     self.len_unpacked, self.len_longest_text)


@dataclass
class TextComprInfo:
    """Header of one compressed language block."""

    FORMAT: ClassVar[str] = "HH3I"
    SIZE: ClassVar[int] = 16

    lang: int = TextLang.JAPANESE
    unknown: int = 1
    next_offset: int = 0
    packed_len: int = 0
    unpacked_len: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, big_endian: bool = False) -> TextComprInfo:
        return cls(*_unpack(cls.FORMAT, data, big_endian))

    def to_bytes(self, big_endian: bool = False) -> bytes:
        return _pack(self.FORMAT, big_endian, self.lang, self.unknown,
                     self.next_offset, self.packed_len, self.unpacked_len)