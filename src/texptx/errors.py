"""Error types and conversion diagnostics with formatted source context."""

from __future__ import annotations

from dataclasses import dataclass, field

from texptx.ast import Environment, Macro, Node, Span


class TexPtxError(Exception):
    """Base class for errors raised while converting a document."""

    def __init__(self, message: str, span: Span | None = None) -> None:
        self.message = message
        self.span = span
        super().__init__(message)


class ArgumentSignatureError(TexPtxError):
    """A node's argument list does not match any accepted signature.

    Only happens when arguments were not attached before the rule ran.
    """


class SystemeError(TexPtxError):
    """A \\systeme body could not be converted to an array."""


class CodecError(TexPtxError):
    """Malformed JSON AST input."""


def format_snippet(
    severity: str,
    message: str,
    span: Span | None,
    source: str = "",
    filename: str = "input.tex",
) -> str:
    """Render a message with a gutter, the source line and carets."""
    if span is None:
        return f"{severity}: {message}\n  --> {filename}"

    lines = source.splitlines(keepends=True)
    line_idx = span.start.line - 1
    col = span.start.column

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
        f"{severity}: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{span.start.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A message attached to the file being converted."""

    message: str
    span: Span | None
    origin: str
    severity: str = "warning"

    def format(self, source: str = "", filename: str = "input.tex") -> str:
        return format_snippet(self.severity, f"{self.message} [{self.origin}]", self.span, source, filename)


@dataclass
class DiagnosticSink:
    """Per-document diagnostic collector. Messages keep emission order."""

    filename: str = "input.tex"
    _messages: list[Diagnostic] = field(default_factory=list, init=False)

    def emit(self, message: str, span: Span | None = None, origin: str = "") -> None:
        self._messages.append(Diagnostic(message, span, origin))

    def add(self, diagnostic: Diagnostic) -> None:
        self._messages.append(diagnostic)

    @property
    def messages(self) -> tuple[Diagnostic, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


def make_warning_message(node: Node, message: str, origin: str) -> Diagnostic:
    """Build a warning anchored at *node*, naming the macro or environment."""
    if isinstance(node, Environment):
        name = f"\\begin{{{node.name}}}"
    elif isinstance(node, Macro):
        name = f"\\{node.name}"
    else:
        name = type(node).__name__
    return Diagnostic(f"{message} (at {name})", getattr(node, "span", None), origin)
