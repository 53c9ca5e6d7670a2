"""A small prefix-notation language with a bytecode compiler and stack virtual machine."""

__version__ = "0.1.0"