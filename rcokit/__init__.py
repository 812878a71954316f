"""VSMX script bytecode reading, writing, disassembly and decompilation, plus RCO record structures and XML value helpers."""

__version__ = "0.1.0"