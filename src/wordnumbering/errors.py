"""Numbering error taxonomy and diagnostics."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Literal, Optional


class NumberingError(Exception):
    """Base class for all numbering errors."""

    code = "numbering_error"


class MalformedDefinition(NumberingError):
    """numbering.xml references an abstract definition or level that does not exist.

    Raised while loading a DefinitionStore; fatal to that store.
    """

    code = "malformed-definition"


class UnresolvedNumberingReference(NumberingError):
    """A paragraph references a numbering instance or level the store cannot resolve."""

    code = "unresolved-numbering-reference"


class FormatRangeViolation(NumberingError):
    """A value cannot be expressed in the requested number format."""

    code = "format-range-violation"


class DocumentPackageError(NumberingError):
    """The document archive could not be opened or lacks word/document.xml."""

    code = "document-package-error"


UNATTACHED_NUMBERING = "unattached-numbering"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem recorded for the caller to surface."""

    code: str
    message: str
    ordinal: Optional[int] = None
    severity: Literal["warning", "error"] = "warning"

    @classmethod
    def from_error(cls, error: NumberingError, ordinal: Optional[int] = None, severity: str = "warning") -> "Diagnostic":
        return cls(code=error.code, message=str(error), ordinal=ordinal, severity=severity)

    def to_dict(self) -> Dict:
        return asdict(self)
