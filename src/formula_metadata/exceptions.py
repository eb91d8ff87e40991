"""Formula extraction exceptions.

Every failure of a parse surfaces to the caller as a FormulaError subclass.
A missing metadata field is not an error; it is an absent value on the record.
"""


class FormulaError(Exception):
    """Base exception for formula metadata extraction."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (path, identifier, line, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class FormulaIOError(FormulaError):
    """Formula file could not be read."""


class InvalidIdentifierError(FormulaError):
    """File stem cannot produce a non-empty class identifier."""


class EvaluationError(FormulaError):
    """Filtered declarations could not be evaluated."""

    @property
    def line_number(self) -> int | None:
        """1-based line number within the filtered source, if known."""
        return self.context.get("line_number")
