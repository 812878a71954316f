import pytest

from rcokit.vsmxdecode import decode
from rcokit.vsmxencode import encode
from rcokit.vsmxfile import VsmxError, VsmxGroup, VsmxMem, VsmxOp


def _body(mem):
    return [line for line in decode(mem).splitlines() if line and not line.startswith(";")]


def test_header_is_a_comment():
    out = decode(VsmxMem())
    assert out.startswith("; Decoded VSMX file")
    assert _body(VsmxMem()) == []


def test_const_int_and_no_arg_ops():
    mem = VsmxMem(code=[VsmxGroup(VsmxOp.CONST_INT, 5), VsmxGroup(VsmxOp.END_STMT, 0)])
    assert _body(mem) == ["CONST_INT 5", "END_STATEMENT"]


def test_bool_values():
    mem = VsmxMem(code=[VsmxGroup(VsmxOp.CONST_BOOL, 1), VsmxGroup(VsmxOp.CONST_BOOL, 0)])
    assert _body(mem) == ["CONST_BOOL true", "CONST_BOOL false"]


def test_string_variable_and_property_operands():
    mem = VsmxMem(
        code=[
            VsmxGroup(VsmxOp.CONST_STRING, 0),
            VsmxGroup(VsmxOp.VARIABLE, 0),
            VsmxGroup(VsmxOp.PROPERTY, 0),
        ],
        texts=["hello"],
        names=["foo"],
        props=["bar"],
    )
    assert _body(mem) == ['CONST_STRING "hello"', "NAME foo", "PROPERTY bar"]


def test_jump_lines_are_one_based():
    mem = VsmxMem(code=[VsmxGroup(VsmxOp.JUMP_FALSE, 3)])
    assert _body(mem) == ["JUMP_IF_FALSE line=4"]


def test_function_fields():
    op_id = VsmxOp.FUNCTION | (2 << 8) | (1 << 24)
    mem = VsmxMem(code=[VsmxGroup(op_id, 3)])
    assert _body(mem) == ["FUNCTION args=2, localvars=1, start_line=4"]


def test_invalid_text_index_raises():
    mem = VsmxMem(code=[VsmxGroup(VsmxOp.CONST_STRING, 1)], texts=["only"])
    with pytest.raises(VsmxError):
        decode(mem)


def test_invalid_name_index_raises():
    with pytest.raises(VsmxError):
        decode(VsmxMem(code=[VsmxGroup(VsmxOp.VARIABLE, 0)]))


def test_float_value():
    mem = VsmxMem(code=[VsmxGroup.from_float(VsmxOp.CONST_FLOAT, 1.5)])
    (line,) = _body(mem)
    assert line.startswith("CONST_FLOAT ")
    assert float(line.split()[1]) == 1.5


def test_round_trip_through_encode():
    mem = VsmxMem(
        code=[
            VsmxGroup(VsmxOp.VARIABLE, 0),
            VsmxGroup(VsmxOp.CONST_STRING, 0),
            VsmxGroup(VsmxOp.OPERATOR_ASSIGN, 0),
            VsmxGroup(VsmxOp.END_STMT, 0),
            VsmxGroup(VsmxOp.FUNCTION | (1 << 8), 7),
            VsmxGroup(VsmxOp.SECT_START, 9),
            VsmxGroup(VsmxOp.CALL_METHOD, 2),
            VsmxGroup(VsmxOp.CONST_BOOL, 1),
            VsmxGroup(VsmxOp.UNNAMED_VAR, 3),
            VsmxGroup(VsmxOp.MAKE_FLOAT_ARRAY, 4),
            VsmxGroup(VsmxOp.END, 0),
        ],
        texts=["some text"],
        names=["x"],
    )
    assert encode(decode(mem)) == mem