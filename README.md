# rcokit

A library for the resource files (RCO) used by PSP and PS3 system menus,
and for the VSMX script bytecode that they carry.

## Installation

```
pip install .
```

The package uses only the Python standard library (Python 3.10 or later).

## Modules

### `rcokit.vsmxfile`

- `VsmxMem` holds a VSMX program. `code` is a list of `VsmxGroup`, and
  `texts`, `props` and `names` are the string pools.
  - `VsmxMem.from_bytes(data)` and `VsmxMem.read(stream)` parse a file. Both
    version 1 (PSP) and version 2 (PS3 `.jsx`) headers are accepted.
  - `VsmxMem.to_bytes()` and `VsmxMem.write(stream)` always write a
    version 1 file.
- `VsmxGroup(id, value)` is one instruction. `as_float()` reads the argument
  as a 32-bit float, and `VsmxGroup.from_float(op_id, value)` builds a group
  that holds a float.
- `VsmxOp` lists the known opcodes.
- `op_name(op_id)` gives the mnemonic for an opcode.
- `op_from_name(name)` gives the opcode for a mnemonic. Case is ignored, and
  `UNKNOWN_<hex>` gives the number directly.
- `VsmxError` (a `ValueError`) is raised for malformed data, for bad indexes
  and for invalid assembly.

### `rcokit.vsmxdecode`

`decode(mem)` returns a text listing with one mnemonic and its argument on
each line, after a `;` comment header.

### `rcokit.vsmxencode`

`encode(text)` assembles such a listing into a `VsmxMem`. Blank lines and
lines that start with `;` are skipped. Strings, properties and names are
deduplicated into their pools.

### `rcokit.decompile`

`decompile(mem)` returns JavaScript-like source rebuilt from the bytecode.
Expressions, calls, object and array literals, `if`/`else`, `while`, `for`
and inline conditionals are recognised by pattern. The output is
experimental and often imprecise. Each statement line is prefixed with a
`/*<group>*/` comment.

### `rcokit.decompstack`

These are the stacks the decompiler works with: `StackItem`, `ValueStack`,
`Marker` and `MarkerStack`. Popping an empty stack raises `VsmxError`.

### `rcokit.rcofile`

This module holds the RCO constants (`RCO_SIGNATURE`, `RCO_NULL_PTR`) and
these enumerations: `TableType`, `TextLang`, `TextFormat`, `DataCompression`,
`ImageFormat`, `ModelFormat`, `SoundFormat`, `ObjType`, `RefType` and
`AnimType`.

It also holds the fixed records of the format: `PRFHeader`,
`RCOEntryHeader`, `TextEntryHeader`, `TextIndex`, `ImgModelEntry`,
`SoundEntryHeader`, `FontEntry`, `Reference`, `HeaderComprInfo` and
`TextComprInfo`. Each one has `from_bytes(data, big_endian)` and
`to_bytes(big_endian)`. `ImgModelEntry` also takes a `ps3` flag. Its
unpacked size is read only when the entry is compressed.

### `rcokit.xmlvalues`

Helpers for attribute values in the XML description of an RCO file:

- `split_comma_list` and `expand_fname_to_fmt`
- `text_to_int` and `int_to_text`, which map names to table indexes and back,
  with an `unknown<n>` fallback
- `parse_value`, which reads `0x` hex, or else gives the bits of a 32-bit
  float
- `parse_ref`, which reads `nothing`, `<kind>:<label>` or
  `unknown<n>:<pointer>` into a `ParsedRef`
- `firmware_to_version_id`
- `unknown_attrib_names`

Values that cannot be parsed raise `ValueError`.

### `rcokit.labels`

`LabelTable` is a pool of NUL-terminated labels, each padded to 4 bytes.
`add(label)` returns an offset and reuses an existing entry when there is
one. `get(offset)` reads a label back, and `to_bytes()` returns the pool.

`reorder_labels(table, offsets)` rebuilds the pool in the order the offsets
are given. It keeps the original pool if the rebuilt one would be shorter.

### `rcokit.textxml`

- `parse_text_xml(source, text_format, labels, big_endian)` reads a
  `TextLang` document, from a path, a stream or bytes. It returns a
  `TextLangData` that holds `(label_offset, length, offset)` entries and the
  encoded, padded text data.
- `read_text_file(path, text_format, big_endian)` reads one text file. A
  leading byte order mark decides how it is converted.

## Example

```python
from rcokit.vsmxencode import encode
from rcokit.vsmxdecode import decode
from rcokit.decompile import decompile

mem = encode("NAME x\nCONST_INT 5\nASSIGN\nEND_STATEMENT\nEND_SCRIPT\n")
data = mem.to_bytes()            # VSMX file image

print(decode(mem))               # instruction listing
print(decompile(mem))            # contains "x = 5;"
```

Warnings about unusual but readable input are sent to the standard
`logging` module.

## What it does not do

rcokit does not read or write whole RCO files. It does not produce or load
the complete XML description of an RCO tree. It does not compress or
decompress resource data, and it does not convert images, sounds or models.
There is no command-line tool. The package is a library of the pieces listed
above.

## Running the tests

```
pip install .[test]
pytest
```