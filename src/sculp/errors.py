"""Diagnostics, Rust-style rendering and the parse error hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sculp.source import Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def error_diagnostic(
    code: str, message: str, span: Span | None, notes: list[str] | None = None,
) -> Diagnostic:
    """Build an error diagnostic, labelled with ``span`` when known."""
    labels = [DiagnosticLabel(span=span)] if span is not None else []
    return Diagnostic(
        severity=Severity.ERROR,
        code=code,
        message=message,
        labels=labels,
        notes=notes or [],
    )


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._file_cache: dict[str, list[str]] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def add_source(self, filename: str, source: str) -> None:
        """Register in-memory source text (e.g. stdin) for ``filename``."""
        self._file_cache[filename] = source.splitlines()

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._file_cache:
            try:
                path = Path(filename)
                if path.is_file():
                    self._file_cache[filename] = path.read_text().splitlines()
                else:
                    self._file_cache[filename] = []
            except OSError:
                self._file_cache[filename] = []
        lines = self._file_cache[filename]
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E200]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        bar = f"  {self._c(_BLUE)}   |{self._c(_RESET)}"
        for label in diag.labels:
            span = label.span
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}")
            lines.append(bar)

            source_line = self._get_source_line(span.file, span.start_line)
            if source_line is None:
                continue
            lines.append(
                f"  {self._c(_BLUE)}{span.start_line:>4} |{self._c(_RESET)} {source_line}"
            )
            # A span crossing lines is underlined to the end of its first line
            end_col = span.end_col if span.end_line == span.start_line else len(source_line)
            carets = "^" * max(1, end_col - span.start_col + 1)
            lines.append(
                f"{bar} {' ' * (span.start_col - 1)}{self._c(color)}{carets}{self._c(_RESET)}"
            )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


class SculpError(Exception):
    """A parse failure carrying the diagnostic that describes it."""

    code = "E000"

    def __init__(
        self, message: str, span: Span | None = None, *,
        code: str | None = None, notes: list[str] | None = None,
    ) -> None:
        self.diagnostic = error_diagnostic(code or self.code, message, span, notes)
        super().__init__(message)

    @property
    def span(self) -> Span | None:
        labels = self.diagnostic.labels
        return labels[0].span if labels else None


class SculpSyntaxError(SculpError):
    """Malformed token sequence, unknown token or wrong procedure arity."""

    code = "E200"


class SculpTypeError(SculpError, TypeError):
    """A procedure argument does not match its registered variant."""

    code = "E300"


class SculpReferenceError(SculpError, LookupError):
    """A template placeholder has no entry in the insert table."""

    code = "E400"
