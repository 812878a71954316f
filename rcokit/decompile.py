"""Experimental reconstruction of script source from VSMX code."""

from __future__ import annotations

import logging

from .decompstack import Marker, MarkerStack, StackItem, ValueStack
from .vsmxfile import VsmxError, VsmxMem, VsmxOp

log = logging.getLogger(__name__)

HEADER = (
    "// Decompiled VSMX -> Javascript output by rcokit\n"
    "//Note, this is highly experimental and the output may be inaccurate.\n\n"
)

_MASK = 0xFFFFFFFF

_BINARY = {
    VsmxOp.OPERATOR_ASSIGN: "=",
    VsmxOp.OPERATOR_ADD: "+",
    VsmxOp.OPERATOR_SUBTRACT: "-",
    VsmxOp.OPERATOR_MULTIPLY: "*",
    VsmxOp.OPERATOR_DIVIDE: "/",
    VsmxOp.OPERATOR_MOD: "%",
    VsmxOp.OPERATOR_EQUAL: "==",
    VsmxOp.OPERATOR_NOT_EQUAL: "!=",
    VsmxOp.OPERATOR_IDENTITY: "===",
    VsmxOp.OPERATOR_NON_IDENTITY: "!==",
    VsmxOp.OPERATOR_LT: "<",
    VsmxOp.OPERATOR_LTE: "<=",
    VsmxOp.OPERATOR_GT: ">",
    VsmxOp.OPERATOR_GTE: ">=",
    VsmxOp.OPERATOR_B_AND: "&",
    VsmxOp.OPERATOR_B_XOR: "^",
    VsmxOp.OPERATOR_B_OR: "|",
    VsmxOp.OPERATOR_LSHIFT: "<<",
    VsmxOp.OPERATOR_RSHIFT: ">>",
    VsmxOp.OPERATOR_URSHIFT: ">>>",
}
_UNARY = {
    VsmxOp.OPERATOR_POSITIVE: "+",
    VsmxOp.OPERATOR_NEGATE: "-",
    VsmxOp.OPERATOR_NOT: "!",
    VsmxOp.OPERATOR_B_NOT: "~",
    VsmxOp.OPERATOR_TYPEOF: "typeof ",
}
# Both pre and post forms are rendered postfix.
_INCDEC = {
    VsmxOp.P_INCREMENT: "++",
    VsmxOp.INCREMENT: "++",
    VsmxOp.P_DECREMENT: "--",
    VsmxOp.DECREMENT: "--",
}
_CALLS = frozenset({VsmxOp.CALL_FUNC, VsmxOp.CALL_METHOD, VsmxOp.CALL_NEW})
_JUMPS = (VsmxOp.JUMP_TRUE, VsmxOp.JUMP_FALSE)


class _Decompiler:
    def __init__(self, mem: VsmxMem) -> None:
        self.mem = mem
        self.code = mem.code
        self.n = len(mem.code)
        self.out: list[str] = []
        self.indent = 0
        self.indent_add = 0
        self.stmt_start = 0
        self.concat = 1
        self.stack = ValueStack()
        self.marks = MarkerStack()

    def run(self) -> str:
        self.out.append(HEADER)
        i = 0
        while i < self.n:
            i = self._step(i) + 1
        return "".join(self.out)

    # helpers

    def _val(self, i: int) -> int:
        return self.code[i].value & _MASK

    def _id(self, i: int) -> int:
        return self.code[i].id & _MASK

    @staticmethod
    def _lookup(pool: list[str], index: int, kind: str, i: int) -> str:
        if index >= len(pool):
            raise VsmxError(f"Invalid {kind} index 0x{index:x} at group {i}!")
        return pool[index]

    def _line_start(self) -> None:
        self.out.append(f"/*{self.stmt_start}*/\t" + "\t" * self.indent)

    def _concat_pop(self, text: str) -> str:
        for _ in range(self.concat):
            text = self.stack.pop().text + text
        return text

    def _open(self, i: int) -> None:
        self.marks.push(Marker(self._val(i), i))
        self.indent_add += 1

    # markers

    def _close_markers(self, i: int, item: StackItem) -> None:
        while self.marks and self.marks.top.loc == i:
            if self.stack:
                item.text = self._concat_pop(item.text)
                self.concat = 1
                top = self.marks.top
                if self._id(top.src) == VsmxOp.JUMP_FALSE:
                    if self._id(i) == VsmxOp.JUMP_FALSE:
                        top.loc = self._val(i)
                        self.marks.push(top)
                        item.text += " /* AND condition shown as nested if */ "
                    else:
                        item.text += " : false )"
                else:
                    item.text += " )"
                self.stack.push(item)
                item.text = ""
            else:
                if self.indent > 0:
                    self.indent -= 1
                else:
                    log.warning("Internal state nesting error!")
                self._line_start()
                self.out.append("}\n")
            self.marks.pop()

    # dispatch

    def _step(self, i: int) -> int:
        gid = self._id(i)
        low = gid & 0xFF
        val = self._val(i)
        item = StackItem()
        stack = self.stack
        mem = self.mem

        if gid >> 8 and low != VsmxOp.FUNCTION:
            log.warning("Unexpected flags 0x%x for id 0x%x at %d", gid >> 8, low, i)

        self._close_markers(i, item)

        if low in _BINARY:
            right = stack.pop()
            left = stack.pop()
            item.text = f"{left.text} {_BINARY[low]} {right.text}"
            stack.push(item)
        elif low in _UNARY:
            prev = stack.pop()
            item.text = f"{_UNARY[low]}({prev.text})"
            stack.push(item)
        elif low in _INCDEC:
            prev = stack.pop()
            item.text = f"({prev.text}){_INCDEC[low]}"
            stack.push(item)
        elif low == VsmxOp.CONST_NULL:
            item.text = "null"
            stack.push(item)
        elif low == VsmxOp.CONST_EMPTYARRAY:
            item.text = "[]"
            stack.push(item)
        elif low == VsmxOp.CONST_BOOL:
            if val == 0:
                item.text = "false"
            else:
                item.text = "true"
                if val != 1:
                    log.warning("Boolean value at group #%d is not 0 or 1.", i)
            stack.push(item)
        elif low == VsmxOp.CONST_INT:
            item.text = str(val)
            stack.push(item)
        elif low == VsmxOp.CONST_FLOAT:
            item.text = "%#g" % self.code[i].as_float()
            stack.push(item)
        elif low == VsmxOp.CONST_STRING:
            item.text = f'"{self._lookup(mem.texts, val, "text", i)}"'
            stack.push(item)
        elif low == VsmxOp.THIS:
            item.text = "this"
            stack.push(item)
        elif low == VsmxOp.UNNAMED_VAR:
            item.text = f"__var{val}"
            stack.push(item)
        elif low == VsmxOp.VARIABLE:
            item.text = self._lookup(mem.names, val, "name", i)
            stack.push(item)
        elif low == VsmxOp.UNK_31:
            prop = self._lookup(mem.props, val, "prop", i)
            if stack.depth >= 1:
                value = stack.pop()
                obj = stack.pop()
                item.text = f"{obj.text}.{prop} = {value.text}"
            else:
                item.text = prop
            stack.push(item)
        elif low in (VsmxOp.PROPERTY, VsmxOp.METHOD, VsmxOp.UNSET):
            prev = stack.pop()
            prop = self._lookup(mem.props, val, "property/method", i)
            if gid == VsmxOp.UNSET:
                item.text = f"delete {prev.text}.{prop}"
            else:
                item.text = f"{prev.text}.{prop}"
            stack.push(item)
        elif low == VsmxOp.MAKE_FLOAT_ARRAY:
            text = ""
            for j in range(val):
                prev = stack.pop()
                text = f" {prev.text}," + text if j else f" {prev.text} "
            item.text = "[" + text + "]"
            stack.push(item)
        elif low == VsmxOp.CONST_OBJECT:
            item.text = "{}"
            item.object_flag = 1
            stack.push(item)
        elif low == VsmxOp.OBJ_ADD_ATTR:
            prop = self._lookup(mem.props, val, "prop", i)
            prev = stack.pop()
            obj = stack.pop()
            if obj.object_flag == 0:
                log.warning("Object elem being pushed, but object not found at %d!", i)
            else:
                if obj.object_flag == 1:
                    item.text = f"{{ {prop}: {prev.text} }}"
                else:
                    if len(obj.text) < 3:
                        raise VsmxError(f"Internal object handling error at {i}!")
                    item.text = f"{obj.text[:-2]}, {prop}: {prev.text} }}"
                item.object_flag = 2
                stack.push(item)
        elif low == VsmxOp.ARRAY:
            item.text = "[]"
            item.array_flag = 1
            stack.push(item)
        elif low == VsmxOp.ARRAY_ELEM:
            prev = stack.pop()
            array = stack.pop()
            if array.array_flag == 0:
                log.warning("Array elem being pushed, but array not found at %d!", i)
            else:
                if array.array_flag == 1:
                    item.text = f"[ {prev.text} ]"
                else:
                    if len(array.text) < 3:
                        raise VsmxError(f"Internal array handling error at {i}!")
                    item.text = f"{array.text[:-2]}, {prev.text} ]"
                item.array_flag = 2
                stack.push(item)
        elif low == VsmxOp.STACK_PUSH:
            if not (i + 1 < self.n and self._id(i + 1) in _JUMPS):
                stack.push(stack.top)
        elif low == VsmxOp.FUNCTION:
            return self._function(i, item)
        elif low == VsmxOp.ARRAY_INDEX:
            idx = stack.pop()
            parent = stack.pop()
            item.text = f"{parent.text}[{idx.text}]"
            stack.push(item)
        elif low == VsmxOp.ARRAY_INDEX_ASSIGN:
            value = stack.pop()
            idx = stack.pop()
            parent = stack.pop()
            item.text = f"{parent.text}[{idx.text}] = {value.text}"
            stack.push(item)
        elif low in _CALLS:
            self._call(i, item, low, val)
        elif low == VsmxOp.JUMP_TRUE:
            return self._jump_true(i, item)
        elif low == VsmxOp.SECT_START:
            result = self._section_start(i, item)
            if result is not None:
                op, not_sect_start = result
                if not not_sect_start:
                    self._open(i)
                self._end_statement(i, item, op)
        elif low == VsmxOp.JUMP_FALSE:
            op = self._jump_false(i, item)
            if op is not None:
                self._open(i)
                self._end_statement(i, item, op)
        elif low == VsmxOp.RETURN:
            self._end_statement(i, item, "return %s;\n")
        elif low == VsmxOp.END_STMT:
            self._end_statement(i, item, "%s;\n")
        elif low == VsmxOp.END:
            if i + 1 < self.n:
                log.warning("End marker found at %d, but is not end of code!", i)
        elif low in (VsmxOp.DEBUG_FILE, VsmxOp.DEBUG_LINE):
            pass
        else:
            log.warning("Unknown id 0x%x at %d", gid, i)
            item.text = f"<< UNKNOWN 0x{gid:x} 0x{val:x} >>"
            stack.push(item)
        return i

    # complex cases

    def _call(self, i: int, item: StackItem, low: int, val: int) -> None:
        stack = self.stack
        if not stack or stack.depth < val:
            raise VsmxError(
                f"Not enough arguments to perform requested function call at group {i}."
            )
        if val > 0:
            text = " )"
            for arg in range(val):
                prev = stack.pop()
                text = (", " if arg + 1 < val else "") + prev.text + text
            name = stack.pop()
            item.text = f"{name.text}( {text}"
        else:
            item.text = f"{stack.pop().text}()"
        if low == VsmxOp.CALL_NEW:
            item.text = "new " + item.text
        stack.push(item)

    def _function(self, i: int, item: StackItem) -> int:
        gid = self._id(i)
        val = self._val(i)
        n = self.n
        stack = self.stack
        end_stmt_style = (
            i + 3 < n
            and self._id(i + 2) == VsmxOp.END_STMT
            and self._id(i + 3) == VsmxOp.SECT_START
            and val == i + 4
        )
        num_args = (gid >> 8) & 0xFF
        flag = (gid >> 16) & 0xFF
        if flag:
            log.warning(
                "Unexpected flag value for function at %d, expected 0, got %d", i, flag
            )
        args = f"/*flag={gid >> 24}*/"
        if num_args:
            args += " " + ", ".join(f"__var{k}" for k in range(1, num_args + 1))

        if (
            i + 2 < n
            and self._id(i + 1) == VsmxOp.OPERATOR_ASSIGN
            and (end_stmt_style or (self._id(i + 2) == VsmxOp.SECT_START and val == i + 3))
        ):
            if self._val(i + 1) or (end_stmt_style and self._val(i + 2)):
                log.warning("Unexpected values in function definition style at %d", i)
            if not stack:
                log.warning("Function encountered at %d, but no name found on stack!", i)
                item.text = f"function __unnamed_{i}__({args})"
            elif stack.depth == 0:
                prev = stack.pop()
                item.text = f"{prev.text} = function({args})"
            elif stack.depth == 1:
                prev = stack.pop()
                var = stack.pop()
                item.text = f"{var.text} = function {prev.text}({args})"
            else:
                log.warning(
                    "Function encountered at %d, but more than one item found on stack!", i
                )
                prev = stack.pop()
                item.text = f"{prev.text} = function({args})"
            stack.push(item)
            return i + (2 if end_stmt_style else 1)

        if i + 1 < n and self._id(i + 1) == VsmxOp.SECT_START and val == i + 2:
            prev = stack.pop()
            item.text = f"function {prev.text}({args})"
        else:
            log.warning("Unexpected function definition syntax at %d!", i)
            item.text = f"function __{val}__({args})"
        stack.push(item)
        return i

    def _jump_true(self, i: int, item: StackItem) -> int:
        prev = self.stack.pop()
        n = self.n
        val = self._val(i)
        is_for = False
        if i + 1 < n and self._id(i + 1) == VsmxOp.SECT_START and 1 <= val < n:
            nxt = self._val(i + 1)
            is_for = (
                self._id(val - 1) == VsmxOp.SECT_START
                and self._val(val - 1) == self.stmt_start
                and val < nxt < n
                and self._id(nxt - 1) == VsmxOp.SECT_START
                and self._val(nxt - 1) == i + 2
            )
        if is_for:
            item.text = f"for(; {prev.text} /* jump to {val} */; "
            self.stack.push(item)
            self.marks.push(Marker(self._val(i + 1), i + 1))
            self.marks.push(Marker(val, i))
            i += 1
        else:
            item.text = f"( {prev.text} ) || /* ends at {val} */ ( "
            self.stack.push(item)
            self.marks.push(Marker(val, i))
        self.concat += 1
        return i

    def _section_start(self, i: int, item: StackItem) -> tuple[str, bool] | None:
        val = self._val(i)
        marks = self.marks
        top = marks.top if marks else None
        if top is not None and (
            self._id(top.src) == VsmxOp.JUMP_FALSE
            or (self._id(top.src) == VsmxOp.SECT_START and val < i)
        ):
            if val < i:
                self.stack.push(item)
                if self.indent > 0:
                    self.indent -= 1
                if top.loc == i + 1:
                    marks.pop()
                else:
                    log.warning("Unexpected loop structure at %d!", i)
                return f"}} %s/* jump back to {val} */\n", True
            if top.loc == i + 1:
                if self.indent > 0:
                    self.indent -= 1
                else:
                    log.warning("Internal state nesting error!")
                if self.stack:
                    log.warning("Unexpected elements found in stack at %d!", i)
                marks.pop()
            else:
                log.warning("Unexpected else stack structure at %d!", i)
            if self.stack:
                self.stack.top.text += " : "
                marks.push(Marker(val, i))
                return None
            self.stack.push(item)
            return f"}} else %s{{ /* ends at {val} */\n", False
        if (
            top is not None
            and self._id(top.src) == VsmxOp.JUMP_TRUE
            and self._val(top.src) == i + 1
        ):
            if self.stack:
                log.warning("Unexpected stack at end of for at %d", i)
            self.stack.push(item)
            self.indent_add += 1
            marks.pop()
            return f"%s /* return to {val} */) {{\n", True
        return f"%s {{ /* ends at {val} */\n", False

    def _jump_false(self, i: int, item: StackItem) -> str | None:
        val = self._val(i)
        if (val - 1) & _MASK >= self.n:
            raise VsmxError(f"Invalid jump reference supplied at {i}")
        if (
            self._id(val - 1) == VsmxOp.SECT_START
            and self._val(val - 1) == self.stmt_start
        ):
            return f"while( %s ) {{ /* ends at {val} */\n"
        if self.stack and self.stack.depth > self.concat - 1:
            text = self._concat_pop("")
            self.concat = 2
            item.text = f"( {text} ? /* ends at {val} */ "
            self.stack.push(item)
            self.marks.push(Marker(val, i))
            return None
        return f"if( %s ) {{ /* ends at {val} */\n"

    def _end_statement(self, i: int, item: StackItem, op: str) -> None:
        if self._id(i) == VsmxOp.END_STMT and i and self._id(i - 1) in _JUMPS:
            return
        if not self.stack:
            log.warning("No stack at end of statement at %d!", i)
            return
        if self.stack.depth > self.concat - 1:
            log.warning(
                "End of statement but more stack elements than expected at groups %d-%d!",
                self.stmt_start, i,
            )
        self._line_start()
        text = self._concat_pop(item.text)
        self.out.append(op % text)
        self.concat = 1
        self.stack.clear()
        self.stmt_start = i + 1
        self.indent += self.indent_add
        self.indent_add = 0


def decompile(mem: VsmxMem) -> str:
    """Reconstruct approximate script source from a VSMX program."""
    return _Decompiler(mem).run()