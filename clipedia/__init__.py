"""Clipedia - searchable, auto-tagged clipboard history"""

__version__ = "0.3.0"
