"""Disassembly of VSMX code into its line-per-instruction text form."""

from __future__ import annotations

import logging

from .vsmxfile import VsmxError, VsmxMem, VsmxOp, op_name

log = logging.getLogger(__name__)

HEADER_LINE = "; Decoded VSMX file written by rcokit\n\n"

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


def _lookup(pool: list[str], index: int, kind: str, group: int) -> str:
    if index >= len(pool):
        raise VsmxError(f"Invalid {kind} index 0x{index:x} at group {group}!")
    return pool[index]


def _operand(mem: VsmxMem, index: int) -> str:
    group = mem.code[index]
    low = group.id & 0xFF
    val = group.value & 0xFFFFFFFF
    line = index + 1

    if low == VsmxOp.CONST_BOOL:
        if val == 1:
            return " true"
        if val == 0:
            return " false"
        log.warning("Unexpected boolean value 0x%x at line %d!", val, line)
        return f" 0x{val:x}"
    if low in (VsmxOp.CONST_INT, VsmxOp.DEBUG_LINE, VsmxOp.UNNAMED_VAR):
        return f" {val}"
    if low == VsmxOp.CONST_FLOAT:
        return " %#g" % group.as_float()
    if low in (VsmxOp.CONST_STRING, VsmxOp.DEBUG_FILE):
        return f' "{_lookup(mem.texts, val, "text", index)}"'
    if low == VsmxOp.VARIABLE:
        return f" {_lookup(mem.names, val, 'name', index)}"
    if low in _PROP_OPS:
        return f" {_lookup(mem.props, val, 'property', index)}"
    if low == VsmxOp.FUNCTION:
        flag = (group.id >> 16) & 0xFF
        if flag:
            log.warning(
                "Unexpected localvars value for function at line %d, expected 0, got %d",
                line, flag,
            )
        args = (group.id >> 8) & 0xFF
        local_vars = (group.id >> 24) & 0xFF
        return f" args={args}, localvars={local_vars}, start_line={(val + 1) & 0xFFFFFFFF}"
    if low in _JUMP_OPS:
        return f" line={(val + 1) & 0xFFFFFFFF}"
    if low in _CALL_OPS:
        return f" args={val}"
    if low == VsmxOp.MAKE_FLOAT_ARRAY:
        return f" items={val}"
    if low in _NO_ARG_OPS:
        if val:
            log.warning("Unexpected non-zero value at line %d!", line)
        return ""
    log.warning("Unknown ID 0x%x at line %d", group.id, line)
    return f" 0x{group.id:x}"


def decode(mem: VsmxMem) -> str:
    """Render a VSMX program as one mnemonic per line."""
    lines = [HEADER_LINE]
    for index, group in enumerate(mem.code):
        lines.append(op_name(group.id) + _operand(mem, index) + "\n")
    return "".join(lines)