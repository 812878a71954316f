"""Assembly of the line-per-instruction VSMX text form into a program."""

from __future__ import annotations

import logging
import math
import re

from .vsmxfile import VsmxError, VsmxGroup, VsmxMem, VsmxOp, op_from_name

log = logging.getLogger(__name__)

_WHITESPACE = "\t \n\r"
_MASK = 0xFFFFFFFF

_INT_RE = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_UINT_RE = re.compile(r"\s*([+-]?)([0-9]+)")
_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:inf(?:inity)?|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))",
    re.IGNORECASE,
)
_FUNC_RE = re.compile(
    r"args=\s*([+-]?[0-9]+)"
    r"(?:\s*,\s*localvars=\s*([+-]?[0-9]+)"
    r"(?:\s*,\s*start_line=\s*([+-]?[0-9]+))?)?"
)
_LINE_RE = re.compile(r"line=\s*([+-]?[0-9]+)")
_ARGS_RE = re.compile(r"args=\s*([+-]?[0-9]+)")
_ITEMS_RE = re.compile(r"items=\s*([+-]?[0-9]+)")

_NO_ARG_OPS = frozenset({
    VsmxOp.OPERATOR_ASSIGN, VsmxOp.OPERATOR_ADD, VsmxOp.OPERATOR_SUBTRACT,
    VsmxOp.OPERATOR_MULTIPLY, VsmxOp.OPERATOR_DIVIDE, VsmxOp.OPERATOR_MOD,
    VsmxOp.OPERATOR_POSITIVE, VsmxOp.OPERATOR_NEGATE, VsmxOp.OPERATOR_NOT,
    VsmxOp.P_INCREMENT, VsmxOp.P_DECREMENT, VsmxOp.INCREMENT, VsmxOp.DECREMENT,
    VsmxOp.OPERATOR_TYPEOF, VsmxOp.OPERATOR_EQUAL, VsmxOp.OPERATOR_NOT_EQUAL,
    VsmxOp.OPERATOR_IDENTITY, VsmxOp.OPERATOR_NON_IDENTITY, VsmxOp.OPERATOR_LT,
    VsmxOp.OPERATOR_LTE, VsmxOp.OPERATOR_GT, VsmxOp.OPERATOR_GTE,
    VsmxOp.OPERATOR_B_AND, VsmxOp.OPERATOR_B_XOR, VsmxOp.OPERATOR_B_OR,
    VsmxOp.OPERATOR_B_NOT, VsmxOp.OPERATOR_LSHIFT, VsmxOp.OPERATOR_RSHIFT,
    VsmxOp.OPERATOR_URSHIFT, VsmxOp.STACK_PUSH, VsmxOp.END_STMT,
    VsmxOp.CONST_NULL, VsmxOp.CONST_EMPTYARRAY, VsmxOp.CONST_OBJECT,
    VsmxOp.ARRAY, VsmxOp.THIS, VsmxOp.ARRAY_INDEX, VsmxOp.ARRAY_INDEX_ASSIGN,
    VsmxOp.ARRAY_ELEM, VsmxOp.RETURN, VsmxOp.END,
})
_PROP_OPS = frozenset({
    VsmxOp.PROPERTY, VsmxOp.METHOD, VsmxOp.UNK_31, VsmxOp.UNSET, VsmxOp.OBJ_ADD_ATTR,
})
_JUMP_OPS = frozenset({VsmxOp.SECT_START, VsmxOp.JUMP_TRUE, VsmxOp.JUMP_FALSE})
_CALL_OPS = frozenset({VsmxOp.CALL_FUNC, VsmxOp.CALL_METHOD, VsmxOp.CALL_NEW})


def _scan_int(text: str) -> int | None:
    """C-style integer prefix: decimal, 0x hex or leading-zero octal."""
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


def _scan_uint(text: str) -> int | None:
    match = _UINT_RE.match(text)
    if not match:
        return None
    value = int(match.group(2))
    return -value if match.group(1) == "-" else value


def _scan_float(text: str) -> float | None:
    match = _FLOAT_RE.match(text)
    return float(match.group(1)) if match else None


def _float_group(op: int, value: float) -> VsmxGroup:
    try:
        return VsmxGroup.from_float(op, value)
    except OverflowError:
        return VsmxGroup.from_float(op, math.copysign(math.inf, value))


class _Pool:
    """Deduplicated string pool that hands out indexes."""

    def __init__(self, narrow: bool = False) -> None:
        self.items: list[str] = []
        self._index: dict[str, int] = {}
        self._narrow = narrow

    def add(self, text: str) -> int:
        if self._narrow:
            text = "".join(chr(ord(c) & 0xFF) for c in text)
        try:
            return self._index[text]
        except KeyError:
            self.items.append(text)
            self._index[text] = len(self.items) - 1
            return len(self.items) - 1


def _split_line(line: str) -> tuple[str, str | None]:
    space = line.find(" ", 1)
    if space < 0:
        return line, None
    return line[:space], line[space + 1:].lstrip(" ")


def _require(arg: str | None, line: int) -> str:
    if arg is None:
        raise VsmxError(f"[line {line}] Missing argument for operation.")
    return arg


def encode(text: str) -> VsmxMem:
    """Assemble VSMX text (as produced by decoding) into a program."""
    texts = _Pool()
    props = _Pool()
    names = _Pool(narrow=True)
    code: list[VsmxGroup] = []
    line_count = 1

    for raw in text.split("\n"):
        line = raw.strip(_WHITESPACE)
        if not line or line.startswith(";"):
            continue
        op_text, arg = _split_line(line)
        try:
            op = op_from_name(op_text)
        except VsmxError:
            raise VsmxError(f"Invalid operation specified at line {line_count}.") from None

        op_id = op
        value = 0
        group: VsmxGroup | None = None

        if op == VsmxOp.CONST_BOOL:
            arg = _require(arg, line_count)
            if arg.lower() == "true":
                value = 1
            elif arg.lower() == "false":
                value = 0
            else:
                value = _scan_int(arg) or 0
        elif op in (VsmxOp.CONST_INT, VsmxOp.UNNAMED_VAR, VsmxOp.DEBUG_LINE):
            value = _scan_uint(_require(arg, line_count)) or 0
        elif op == VsmxOp.CONST_FLOAT:
            parsed = _scan_float(_require(arg, line_count))
            group = _float_group(op, parsed) if parsed is not None else VsmxGroup(op, 0)
        elif op in (VsmxOp.CONST_STRING, VsmxOp.DEBUG_FILE):
            arg = _require(arg, line_count)
            if len(arg) < 2 or not (arg.startswith('"') and arg.endswith('"')):
                log.warning("[line %d] Bad string style.", line_count)
            else:
                value = texts.add(arg[1:-1])
        elif op == VsmxOp.VARIABLE:
            value = names.add(_require(arg, line_count))
        elif op in _PROP_OPS:
            value = props.add(_require(arg, line_count))
        elif op == VsmxOp.FUNCTION:
            match = _FUNC_RE.match(_require(arg, line_count))
            n_args = flag = start = 0
            if match:
                n_args = int(match.group(1))
                flag = int(match.group(2)) if match.group(2) else 0
                start = int(match.group(3)) if match.group(3) else 0
            value = start - 1
            op_id = ((flag & 0xFF) << 24) | ((n_args & 0xFF) << 8) | op
        elif op in _JUMP_OPS:
            match = _LINE_RE.match(_require(arg, line_count))
            value = (int(match.group(1)) if match else 0) - 1
        elif op in _CALL_OPS:
            match = _ARGS_RE.match(_require(arg, line_count))
            value = int(match.group(1)) if match else 0
        elif op == VsmxOp.MAKE_FLOAT_ARRAY:
            match = _ITEMS_RE.match(_require(arg, line_count))
            value = int(match.group(1)) if match else 0
        elif op in _NO_ARG_OPS:
            if arg:
                log.warning("[line %d] Operator does not have value.", line_count)
        elif arg is not None:
            value = _scan_int(arg) or 0

        code.append(group or VsmxGroup(op_id & _MASK, value & _MASK))
        line_count += 1

    return VsmxMem(code, texts.items, props.items, names.items)