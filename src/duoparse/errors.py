"""Diagnostic records with formatted source context."""

from __future__ import annotations

from dataclasses import dataclass

from duoparse.tokens import Span


@dataclass(frozen=True, slots=True)
class LexError:
    """A lexical diagnostic recorded while scanning; never raised."""

    message: str
    span: Span

    @property
    def line(self) -> int:
        return self.span.start.line

    @property
    def column(self) -> int:
        return self.span.start.column

    def format(self, source: str, filename: str = "<input>") -> str:
        return _format_snippet(self.message, self.span, source, filename)


@dataclass(frozen=True, slots=True)
class ParseError:
    """A syntactic diagnostic recorded while parsing; never raised.

    ``span`` is None only for the internal-fault diagnostic, which has no
    meaningful source position.
    """

    message: str
    span: Span | None

    @property
    def line(self) -> int | None:
        return self.span.start.line if self.span is not None else None

    @property
    def column(self) -> int | None:
        return self.span.start.column if self.span is not None else None

    def format(self, source: str, filename: str = "<input>") -> str:
        if self.span is None:
            return f"error: {self.message}\n --> {filename}"
        return _format_snippet(self.message, self.span, source, filename)


def _format_snippet(message: str, span: Span, source: str, filename: str) -> str:
    lines = source.splitlines(keepends=True)
    line_idx = span.start.line - 1
    col = span.start.column

    # Build the source line (strip trailing newline for display)
    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Underline the full span when on one line, otherwise to end of line
    if span.end.line == span.start.line:
        underline_len = max(1, span.end.column - col)
    else:
        underline_len = max(1, len(source_line) - col + 1)

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(span.start.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{span.start.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )
