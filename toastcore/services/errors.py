"""Error types raised by the parsing and event-stream services.

Parsing is all-or-nothing: every public parse function either returns a
fully validated value or raises :class:`ParseError`.  pydantic's
``ValidationError`` is never allowed to escape to callers.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError


class ParseError(ValueError):
    """Raised when an input document is malformed or has the wrong shape.

    Attributes:
        field:  Dotted location of the offending field, or ``None`` when the
                whole document is unusable (e.g. invalid JSON).
        errors: The underlying pydantic error dicts, if any.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.errors = errors or []

    @classmethod
    def from_validation_error(cls, exc: ValidationError, document: str) -> "ParseError":
        """Build a ParseError describing the first problem in *exc*."""
        errors = exc.errors(include_url=False)
        first = errors[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        if first["type"] == "missing":
            actual = "nothing"
        else:
            actual = type(first.get("input")).__name__
        message = f"Invalid {document}: {field or '<document>'}: {first['msg']} (got {actual})"
        return cls(message, field=field, errors=errors)


class ProtocolViolation(RuntimeError):
    """Raised by event consumers when the Set/End stream contract is broken."""
