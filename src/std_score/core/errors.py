from __future__ import annotations


class ParseError(Exception):
    """A document could not be turned into a FileResult."""


class TableNotFound(ParseError):
    pass


class DocumentDecodeError(ParseError):
    pass


class AliasTableError(ValueError):
    """The alias table is malformed (non-string values, keys colliding after lowercasing)."""
