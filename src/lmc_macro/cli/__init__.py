"""
LMC Macro Command-Line Interface
================================

This package provides the command-line tool for the preprocessor:

- **lmcpp**: expand macros in an LMC assembly source file

The tool is a Click application with built-in help and consistent
error reporting.
"""

__all__ = ["lmcpp"]
