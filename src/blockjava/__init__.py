"""Blockly workspace to Java source compiler."""

__version__ = "0.1.0"
