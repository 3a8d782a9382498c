"""
ReCOP Command-Line Interface
============================

This package provides command-line tools for the ReCOP toolchain:

- **recasm**: assembler (hex dump and MIF output)
- **recdisasm**: disassembler for hex dumps

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["recasm", "recdisasm"]
