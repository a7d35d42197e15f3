"""OTUI document parser."""

from .document import DocumentParser, parse_document

__all__ = ["DocumentParser", "parse_document"]
