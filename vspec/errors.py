# vspec/errors.py
"""
vspec Error Types and Reporting Module

Every failure raised by the specification front end is an instance of
:class:`VspecError`.  Errors carry a structured :class:`ErrorCode`, the
:class:`ErrorPhase` that produced them and a :class:`SourceSpan`, and can be
rendered GCC-style or as JSON.

Architecture Overview:
─────────────────────
┌─────────────────────────────────────────────────────────────────────────────┐
│                          Error Hierarchy                                     │
├─────────────────────────────────────────────────────────────────────────────┤
│  VspecError (base)                                                          │
│  ├── LexicalError              - invalid characters, bad literals           │
│  ├── SpecSyntaxError           - grammar violations                         │
│  ├── ResolutionError           - identifier resolution failures             │
│  │   ├── UnknownSystemEntityError                                           │
│  │   ├── UndefinedGlobalError                                               │
│  │   ├── NotAStructError                                                    │
│  │   ├── UnknownFieldError                                                  │
│  │   └── InvalidFieldNameError                                              │
│  ├── SpecTypeError             - type elaboration failures                  │
│  │   ├── TypeMismatchError                                                  │
│  │   ├── NotAnArrayError                                                    │
│  │   ├── InvalidSliceError                                                  │
│  │   ├── ArityMismatchError                                                 │
│  │   └── UnknownFunctionError                                               │
│  ├── CatalogueError            - malformed type catalogue input             │
│  └── ConfigError               - invalid parser configuration              │
└─────────────────────────────────────────────────────────────────────────────┘

Error Codes:
────────────
Codes follow the pattern VSPEC-NNNN:
  - 0001-0999: Lexical errors
  - 1000-1999: Syntax errors
  - 2000-2999: Type errors
  - 3000-3999: Resolution errors
  - 8000-8999: Catalogue / configuration errors
  - 9000-9999: Internal errors

Example Usage:
──────────────
    from vspec.errors import ErrorReporter, VspecError

    reporter = ErrorReporter(source_file="spec.vs")
    try:
        parser.parse_specs(text)
    except VspecError as exc:
        reporter.report(exc)

    for line in reporter.format_all():
        print(line)
"""

from __future__ import annotations

import difflib
import json
from dataclasses import dataclass, field
from enum import Enum, auto, unique
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR SEVERITY AND CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorSeverity(Enum):
    """Severity levels for vspec diagnostics."""

    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    def __lt__(self, other: "ErrorSeverity") -> bool:
        order = [
            ErrorSeverity.INFO,
            ErrorSeverity.WARNING,
            ErrorSeverity.ERROR,
            ErrorSeverity.FATAL,
        ]
        return order.index(self) < order.index(other)

    def is_error(self) -> bool:
        """Check if this severity represents an error (not warning/info)."""
        return self in (ErrorSeverity.FATAL, ErrorSeverity.ERROR)


@unique
class ErrorPhase(Enum):
    """Front-end phase where the error occurred."""

    LEXICAL = "lexical"        # Literal and character checks
    SYNTAX = "syntax"          # Grammar matching
    SEMANTIC = "semantic"      # Resolution and type elaboration
    CONFIG = "config"          # Catalogue loading, parser settings
    INTERNAL = "internal"


@unique
class ErrorCategory(Enum):
    """Fine-grained error categories for filtering."""

    # Lexical
    INVALID_CHARACTER = auto()
    INVALID_NUMBER = auto()

    # Syntax
    UNEXPECTED_TOKEN = auto()
    UNEXPECTED_EOF = auto()

    # Type
    TYPE_MISMATCH = auto()
    INVALID_OPERAND = auto()
    ARITY_MISMATCH = auto()
    UNDEFINED_FUNCTION = auto()

    # Resolution
    UNDEFINED_SYMBOL = auto()
    INVALID_MEMBER = auto()

    # Inputs
    INVALID_CATALOGUE = auto()
    INVALID_CONFIG = auto()

    INTERNAL_ERROR = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorCode:
    """
    Structured error code.

    The rendered form is ``PREFIX-NNNN`` (for example ``VSPEC-3001``).
    """

    __slots__ = ("prefix", "number", "category", "phase", "default_severity")

    def __init__(
        self,
        prefix: str,
        number: int,
        category: ErrorCategory,
        phase: ErrorPhase,
        default_severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> None:
        self.prefix = prefix
        self.number = number
        self.category = category
        self.phase = phase
        self.default_severity = default_severity

    @property
    def code(self) -> str:
        """Get the full error code string."""
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.category.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


# ───────────────────────────────────────────────────────────────────────────────
# PREDEFINED ERROR CODES
# ───────────────────────────────────────────────────────────────────────────────

class VspecErrorCodes:
    """Predefined error codes for the specification language."""

    # LEXICAL (0001-0999)
    INVALID_CHARACTER = ErrorCode(
        "VSPEC", 1, ErrorCategory.INVALID_CHARACTER, ErrorPhase.LEXICAL
    )
    INVALID_NUMBER_LITERAL = ErrorCode(
        "VSPEC", 2, ErrorCategory.INVALID_NUMBER, ErrorPhase.LEXICAL
    )

    # SYNTAX (1000-1999)
    UNEXPECTED_TOKEN = ErrorCode(
        "VSPEC", 1000, ErrorCategory.UNEXPECTED_TOKEN, ErrorPhase.SYNTAX
    )
    UNEXPECTED_EOF = ErrorCode(
        "VSPEC", 1001, ErrorCategory.UNEXPECTED_EOF, ErrorPhase.SYNTAX
    )

    # TYPE (2000-2999)
    TYPE_MISMATCH = ErrorCode(
        "VSPEC", 2000, ErrorCategory.TYPE_MISMATCH, ErrorPhase.SEMANTIC
    )
    NOT_AN_ARRAY = ErrorCode(
        "VSPEC", 2001, ErrorCategory.INVALID_OPERAND, ErrorPhase.SEMANTIC
    )
    INVALID_SLICE = ErrorCode(
        "VSPEC", 2002, ErrorCategory.INVALID_OPERAND, ErrorPhase.SEMANTIC
    )
    ARITY_MISMATCH = ErrorCode(
        "VSPEC", 2003, ErrorCategory.ARITY_MISMATCH, ErrorPhase.SEMANTIC
    )
    UNKNOWN_FUNCTION = ErrorCode(
        "VSPEC", 2004, ErrorCategory.UNDEFINED_FUNCTION, ErrorPhase.SEMANTIC
    )

    # RESOLUTION (3000-3999)
    UNKNOWN_SYSTEM_ENTITY = ErrorCode(
        "VSPEC", 3000, ErrorCategory.UNDEFINED_SYMBOL, ErrorPhase.SEMANTIC
    )
    UNDEFINED_GLOBAL = ErrorCode(
        "VSPEC", 3001, ErrorCategory.UNDEFINED_SYMBOL, ErrorPhase.SEMANTIC
    )
    NOT_A_STRUCT = ErrorCode(
        "VSPEC", 3002, ErrorCategory.INVALID_MEMBER, ErrorPhase.SEMANTIC
    )
    UNKNOWN_FIELD = ErrorCode(
        "VSPEC", 3003, ErrorCategory.INVALID_MEMBER, ErrorPhase.SEMANTIC
    )
    INVALID_FIELD_NAME = ErrorCode(
        "VSPEC", 3004, ErrorCategory.INVALID_MEMBER, ErrorPhase.SEMANTIC
    )

    # INPUTS (8000-8999)
    INVALID_CATALOGUE = ErrorCode(
        "VSPEC", 8000, ErrorCategory.INVALID_CATALOGUE, ErrorPhase.CONFIG
    )
    INVALID_CONFIG = ErrorCode(
        "VSPEC", 8001, ErrorCategory.INVALID_CONFIG, ErrorPhase.CONFIG
    )

    # INTERNAL (9000-9999)
    INTERNAL_ERROR = ErrorCode(
        "VSPEC", 9000, ErrorCategory.INTERNAL_ERROR, ErrorPhase.INTERNAL,
        ErrorSeverity.FATAL
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE LOCATIONS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """A span of specification source with 1-based start and end positions."""

    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __post_init__(self) -> None:
        if self.end_line == 0:
            object.__setattr__(self, "end_line", self.line)
        if self.end_column == 0:
            object.__setattr__(self, "end_column", self.column)

    @classmethod
    def from_offsets(
        cls,
        text: str,
        start: int,
        end: Optional[int] = None,
        file: str = "",
    ) -> "SourceSpan":
        """Build a span from character offsets into *text*."""
        line, column = _line_column(text, start)
        if end is None or end <= start:
            return cls(file=file, line=line, column=column)
        end_line, end_column = _line_column(text, end)
        return cls(
            file=file,
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
        )

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"

        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))

        return ":".join(parts)


def _line_column(text: str, offset: int) -> Tuple[int, int]:
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR MESSAGE FORMATTING
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ErrorNote:
    """Additional note attached to an error."""

    message: str
    span: Optional[SourceSpan] = None
    label: str = "note"

    def __str__(self) -> str:
        prefix = f"{self.label}: " if self.label else ""
        if self.span:
            return f"{self.span}: {prefix}{self.message}"
        return f"{prefix}{self.message}"


@dataclass
class ErrorMessage:
    """A complete error message with all context."""

    code: ErrorCode
    message: str
    span: SourceSpan = field(default_factory=SourceSpan)
    severity: Optional[ErrorSeverity] = None  # None means use code's default
    notes: List[ErrorNote] = field(default_factory=list)
    hint: str = ""
    source_line: str = ""

    def __post_init__(self) -> None:
        if self.severity is None:
            self.severity = self.code.default_severity

    def add_note(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        label: str = "note",
    ) -> "ErrorMessage":
        self.notes.append(ErrorNote(message=message, span=span, label=label))
        return self

    def with_hint(self, hint: str) -> "ErrorMessage":
        self.hint = hint
        return self

    def to_gcc_format(self) -> str:
        """Format as a GCC-style error message."""
        severity = self.severity.value if self.severity else "error"
        lines = [f"{self.span}: {severity}: {self.message} [{self.code}]"]

        if self.source_line:
            lines.append(f"    {self.source_line}")
            if self.span.column > 0:
                caret_pos = self.span.column - 1
                caret_len = max(1, self.span.end_column - self.span.column)
                lines.append(f"    {' ' * caret_pos}{'^' * caret_len}")

        for note in self.notes:
            lines.append(str(note))

        if self.hint:
            lines.append(f"hint: {self.hint}")

        return "\n".join(lines)

    def to_json(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "code": self.code.code,
            "message": self.message,
            "severity": self.severity.value if self.severity else "error",
            "location": {
                "file": self.span.file,
                "line": self.span.line,
                "column": self.span.column,
                "end_line": self.span.end_line,
                "end_column": self.span.end_column,
            },
            "phase": self.code.phase.value,
            "category": self.code.category.name,
            "notes": [
                {"message": note.message, "label": note.label}
                for note in self.notes
            ],
            "hint": self.hint,
        }

    def __str__(self) -> str:
        return self.to_gcc_format()


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class VspecError(Exception):
    """
    Base exception for all specification front-end errors.

    This exception carries structured error information that can be
    pretty-printed or serialised.
    """

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[Exception] = None,
        notes: Optional[List[ErrorNote]] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.error_message = ErrorMessage(
            code=code or VspecErrorCodes.INTERNAL_ERROR,
            message=message,
            span=span or SourceSpan(),
            severity=severity,
            notes=notes or [],
            hint=hint,
        )
        self.cause = cause

    @property
    def message(self) -> str:
        return self.error_message.message

    @property
    def code(self) -> ErrorCode:
        return self.error_message.code

    @property
    def span(self) -> SourceSpan:
        return self.error_message.span

    @property
    def severity(self) -> ErrorSeverity:
        return self.error_message.severity or ErrorSeverity.ERROR

    def add_note(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        label: str = "note",
    ) -> "VspecError":
        """Add a note to this error."""
        self.error_message.add_note(message, span, label)
        return self

    def with_hint(self, hint: str) -> "VspecError":
        """Add a hint to this error."""
        self.error_message.with_hint(hint)
        return self

    def to_gcc_format(self) -> str:
        return self.error_message.to_gcc_format()

    def to_json(self) -> Dict[str, Any]:
        return self.error_message.to_json()

    def __str__(self) -> str:
        return self.to_gcc_format()


# ───────────────────────────────────────────────────────────────────────────────
# LEXICAL ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class LexicalError(VspecError):
    """Error in the character-level structure of the input."""

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        character: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=message,
            code=code or VspecErrorCodes.INVALID_CHARACTER,
            span=span,
            **kwargs,
        )
        self.character = character


class InvalidCharacterError(LexicalError):
    """Character outside the specification language's alphabet."""

    def __init__(
        self,
        char: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        if len(char) == 1 and not char.isprintable():
            char_desc = f"U+{ord(char):04X}"
        else:
            char_desc = repr(char)

        super().__init__(
            message=f"Invalid character {char_desc}",
            code=VspecErrorCodes.INVALID_CHARACTER,
            span=span,
            character=char,
            **kwargs,
        )


class InvalidLiteralError(LexicalError):
    """Numeric literal that cannot be represented."""

    def __init__(
        self,
        literal: str,
        reason: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f"Invalid literal '{literal}': {reason}",
            code=VspecErrorCodes.INVALID_NUMBER_LITERAL,
            span=span,
            **kwargs,
        )
        self.literal = literal


# ───────────────────────────────────────────────────────────────────────────────
# SYNTAX ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class SpecSyntaxError(VspecError):
    """Input does not match the specification grammar."""

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        rule: str = "",
        found: str = "",
        code: Optional[ErrorCode] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=message,
            code=code or VspecErrorCodes.UNEXPECTED_TOKEN,
            span=span,
            **kwargs,
        )
        self.rule = rule
        self.found = found


# ───────────────────────────────────────────────────────────────────────────────
# RESOLUTION ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class ResolutionError(VspecError):
    """An identifier or member could not be resolved."""

    def __init__(
        self,
        message: str,
        name: str,
        code: ErrorCode,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message=message, code=code, span=span, **kwargs)
        self.name = name


class UnknownSystemEntityError(ResolutionError):
    """``$name`` does not denote a system-model entity."""

    def __init__(
        self,
        name: str,
        span: Optional[SourceSpan] = None,
        known: Sequence[str] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f"Unknown system entity '{name}'",
            name=name,
            code=VspecErrorCodes.UNKNOWN_SYSTEM_ENTITY,
            span=span,
            **kwargs,
        )
        suggestions = _close_matches(name.lstrip("$"), known)
        if suggestions:
            self.with_hint(
                "Did you mean " + ", ".join(f"'${s}'" for s in suggestions) + "?"
            )


class UndefinedGlobalError(ResolutionError):
    """Bare identifier is neither bound, a formal, nor a known global."""

    def __init__(
        self,
        name: str,
        span: Optional[SourceSpan] = None,
        function: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        message = f"Undefined identifier '{name}'"
        if function:
            message += f" in function '{function}'"
        super().__init__(
            message=message,
            name=name,
            code=VspecErrorCodes.UNDEFINED_GLOBAL,
            span=span,
            **kwargs,
        )
        self.function = function


class NotAStructError(ResolutionError):
    """Field access on a value whose type is not a struct."""

    def __init__(
        self,
        field_name: str,
        actual: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f"Cannot access field '{field_name}' of non-struct type {actual}",
            name=field_name,
            code=VspecErrorCodes.NOT_A_STRUCT,
            span=span,
            **kwargs,
        )
        self.actual = actual


class UnknownFieldError(ResolutionError):
    """Struct has no field with the requested name."""

    def __init__(
        self,
        field_name: str,
        struct_name: str,
        span: Optional[SourceSpan] = None,
        known: Sequence[str] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f"Struct '{struct_name}' has no field '{field_name}'",
            name=field_name,
            code=VspecErrorCodes.UNKNOWN_FIELD,
            span=span,
            **kwargs,
        )
        self.struct_name = struct_name
        suggestions = _close_matches(field_name, known)
        if suggestions:
            self.with_hint(
                "Did you mean " + ", ".join(f"'{s}'" for s in suggestions) + "?"
            )


class InvalidFieldNameError(ResolutionError):
    """Field names must be alphanumeric."""

    def __init__(
        self,
        field_name: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f"Invalid field name '{field_name}' (must be alphanumeric)",
            name=field_name,
            code=VspecErrorCodes.INVALID_FIELD_NAME,
            span=span,
            **kwargs,
        )


# ───────────────────────────────────────────────────────────────────────────────
# TYPE ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class SpecTypeError(VspecError):
    """Type elaboration failure."""

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=message,
            code=code or VspecErrorCodes.TYPE_MISMATCH,
            span=span,
            **kwargs,
        )


class TypeMismatchError(SpecTypeError):
    """Operand types are incompatible with an operator."""

    def __init__(
        self,
        expected: str,
        actual: str,
        span: Optional[SourceSpan] = None,
        context: str = "",
        **kwargs: Any,
    ) -> None:
        msg = f"Type mismatch: expected {expected}, found {actual}"
        if context:
            msg = f"{msg} in {context}"
        super().__init__(
            message=msg,
            code=VspecErrorCodes.TYPE_MISMATCH,
            span=span,
            **kwargs,
        )
        self.expected = expected
        self.actual = actual


class NotAnArrayError(SpecTypeError):
    """Index applied to a value whose type is not an array."""

    def __init__(
        self,
        actual: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f"Cannot index into non-array type {actual}",
            code=VspecErrorCodes.NOT_AN_ARRAY,
            span=span,
            **kwargs,
        )
        self.actual = actual


class InvalidSliceError(SpecTypeError):
    """Slice bounds are out of order or out of range."""

    def __init__(
        self,
        hi: int,
        lo: int,
        reason: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f"Invalid slice [{hi}:{lo}]: {reason}",
            code=VspecErrorCodes.INVALID_SLICE,
            span=span,
            **kwargs,
        )
        self.hi = hi
        self.lo = lo


class ArityMismatchError(SpecTypeError):
    """Built-in function called with the wrong number of arguments."""

    def __init__(
        self,
        function_name: str,
        expected: int,
        actual: int,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        plural = "s" if expected != 1 else ""
        super().__init__(
            message=(
                f"Function '{function_name}' expects {expected} "
                f"argument{plural}, got {actual}"
            ),
            code=VspecErrorCodes.ARITY_MISMATCH,
            span=span,
            **kwargs,
        )
        self.function_name = function_name
        self.expected = expected
        self.actual = actual


class UnknownFunctionError(SpecTypeError):
    """Call of a name that is not a built-in function."""

    def __init__(
        self,
        function_name: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f"Unknown function '{function_name}'",
            code=VspecErrorCodes.UNKNOWN_FUNCTION,
            span=span,
            **kwargs,
        )
        self.function_name = function_name


# ───────────────────────────────────────────────────────────────────────────────
# INPUT ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class CatalogueError(VspecError):
    """The type catalogue description is malformed."""

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=message,
            code=VspecErrorCodes.INVALID_CATALOGUE,
            span=span,
            **kwargs,
        )


class ConfigError(VspecError):
    """Parser configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(
            message=message,
            code=VspecErrorCodes.INVALID_CONFIG,
            **kwargs,
        )


def _close_matches(name: str, candidates: Sequence[str]) -> List[str]:
    return difflib.get_close_matches(name, list(candidates), n=3, cutoff=0.6)


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR REPORTER
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorReporter:
    """
    Collects errors raised while processing one or more specification
    sources so they can be reported together.
    """

    def __init__(self, source_file: str = "", source: str = "") -> None:
        self.source_file = source_file
        self._source_lines = source.splitlines()
        self._errors: List[VspecError] = []

    def report(self, error: VspecError) -> None:
        """Record *error*, attaching the offending source line if known."""
        span = error.span
        if (
            not error.error_message.source_line
            and self._source_lines
            and 0 < span.line <= len(self._source_lines)
            and (not span.file or not self.source_file or span.file == self.source_file)
        ):
            error.error_message.source_line = self._source_lines[span.line - 1]
        self._errors.append(error)

    @property
    def errors(self) -> List[VspecError]:
        return list(self._errors)

    def __iter__(self) -> Iterator[VspecError]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def has_errors(self) -> bool:
        return any(e.severity.is_error() for e in self._errors)

    def format_all(self) -> List[str]:
        return [e.to_gcc_format() for e in self._errors]

    def to_json(self, indent: int = 2) -> str:
        return json.dumps([e.to_json() for e in self._errors], indent=indent)
