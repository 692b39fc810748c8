"""Result values returned by the conversion core.

The core never raises on bad input. Every outcome is described by a
``ConversionResult`` so callers can tell "nothing to convert" apart from a
partial failure. Each diagnostic is also written to the module logger at the
matching level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional

from .exceptions import DiagnosticCode, Severity

if TYPE_CHECKING:
    from .plane import Plane

_LOG_LEVELS = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class ConversionStatus(Enum):
    """Overall outcome of one conversion call."""

    CONVERTED = "converted"
    NOTHING_TO_CONVERT = "nothing_to_convert"
    PARTIAL_FAILURE = "partial_failure"
    FAILED = "failed"


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal finding produced during conversion."""

    code: DiagnosticCode
    severity: Severity
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_json(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "context": self.context,
        }


@dataclass
class StreamResult:
    """Insertion outcome for one output stream (pixels, triggers or ToTs).

    Attributes:
        name: Collection name
        entries: Number of entries in the merged record
        created: The collection did not exist before this call
        registered: The collection was registered with the sink
        reason: Failure code when the stream was not registered
    """

    name: str
    entries: int = 0
    created: bool = False
    registered: bool = False
    reason: Optional[DiagnosticCode] = None

    @property
    def ok(self) -> bool:
        return self.registered


@dataclass
class ConversionResult:
    """Outcome of a quick-look or aggregation call."""

    status: ConversionStatus = ConversionStatus.NOTHING_TO_CONVERT
    plane: Optional["Plane"] = None
    streams: List[StreamResult] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when nothing went wrong (including nothing to convert)."""
        return self.status in (ConversionStatus.CONVERTED, ConversionStatus.NOTHING_TO_CONVERT)

    @property
    def failed_streams(self) -> List[StreamResult]:
        return [s for s in self.streams if not s.ok]

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    def stream(self, name: str) -> Optional[StreamResult]:
        for s in self.streams:
            if s.name == name:
                return s
        return None

    def codes(self) -> List[DiagnosticCode]:
        return [d.code for d in self.diagnostics]


class DiagnosticCollector:
    """Accumulates diagnostics for one call and mirrors them to a logger."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger
        self.diagnostics: List[Diagnostic] = []

    def emit(
        self, code: DiagnosticCode, severity: Severity, message: str, **context: Any
    ) -> Diagnostic:
        diagnostic = Diagnostic(code=code, severity=severity, message=message, context=context)
        self.diagnostics.append(diagnostic)
        self._logger.log(
            _LOG_LEVELS[severity], str(diagnostic), extra={"diagnostic": diagnostic}
        )
        return diagnostic

    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.diagnostics)
