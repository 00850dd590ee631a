"""Translate a tiny let/print language into LLVM IR."""

__version__ = "0.1.0"
