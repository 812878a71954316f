import pytest

from rcokit.vsmxencode import encode
from rcokit.vsmxfile import VsmxError, VsmxGroup, VsmxMem, VsmxOp


def test_comments_and_blank_lines_skipped():
    mem = encode("; comment\n\n   \nCONST_INT 5\r\nEND_STATEMENT\n")
    assert mem.code == [VsmxGroup(VsmxOp.CONST_INT, 5), VsmxGroup(VsmxOp.END_STMT, 0)]


def test_op_names_case_insensitive():
    mem = encode("const_null\nReturn\n")
    assert [g.id for g in mem.code] == [VsmxOp.CONST_NULL, VsmxOp.RETURN]


def test_strings_are_deduplicated():
    mem = encode('CONST_STRING "hi"\nCONST_STRING "yo"\nCONST_STRING "hi"\n')
    assert mem.texts == ["hi", "yo"]
    assert [g.value for g in mem.code] == [0, 1, 0]


def test_names_and_props_pools():
    mem = encode("NAME a\nPROPERTY p\nMETHOD p\nNAME b\n")
    assert mem.names == ["a", "b"]
    assert mem.props == ["p"]
    assert [g.value for g in mem.code] == [0, 0, 0, 1]


def test_bool_forms():
    mem = encode("CONST_BOOL true\nCONST_BOOL FALSE\nCONST_BOOL 0x1\n")
    assert [g.value for g in mem.code] == [1, 0, 1]


def test_function_packs_fields_into_id():
    mem = encode("FUNCTION args=2, localvars=1, start_line=4\n")
    (group,) = mem.code
    assert group.id == VsmxOp.FUNCTION | (2 << 8) | (1 << 24)
    assert group.value == 3


def test_jump_line_is_zero_based_internally():
    mem = encode("JUMP line=5\nJUMP_IF_TRUE line=1\n")
    assert [g.value for g in mem.code] == [4, 0]


def test_unknown_op_by_hex():
    mem = encode("UNKNOWN_50 7\n")
    assert mem.code == [VsmxGroup(0x50, 7)]


def test_float_constant():
    (group,) = encode("CONST_FLOAT 1.5\n").code
    assert group.id == VsmxOp.CONST_FLOAT
    assert group.as_float() == 1.5


def test_bad_string_style_gives_zero():
    mem = encode("CONST_STRING hi\n")
    assert mem.texts == []
    assert mem.code == [VsmxGroup(VsmxOp.CONST_STRING, 0)]


def test_invalid_operation_raises():
    with pytest.raises(VsmxError, match="line 2"):
        encode("CONST_NULL\nNOT_AN_OP\n")


def test_missing_argument_raises():
    with pytest.raises(VsmxError):
        encode("NAME\n")


def test_binary_round_trip():
    mem = encode('NAME x\nCONST_STRING "v"\nASSIGN\nEND_STATEMENT\nEND_SCRIPT\n')
    assert VsmxMem.from_bytes(mem.to_bytes()) == mem