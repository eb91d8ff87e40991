"""Capture environment for formula declarations.

Declarations evaluated from a filtered formula body are recorded here instead
of being performed. One CapturedAttributes record belongs to one evaluation:
it is created by the evaluator, read once by the retriever and then dropped.
Nothing in this module performs I/O or runs script code.
"""

import logging

from .exceptions import EvaluationError

logger = logging.getLogger(__name__)

CAPTURED_FIELDS: tuple[str, ...] = ("desc", "homepage", "url", "sha256")

# Declarations a formula class body may contain that carry no extracted value.
NOOP_DECLARATIONS: frozenset[str] = frozenset(
    {
        "bottle",
        "caveats",
        "compatibility_version",
        "conflicts_with",
        "cxxstdlib_check",
        "depends_on",
        "deprecate!",
        "disable!",
        "env",
        "fails_with",
        "head",
        "install",
        "keg_only",
        "license",
        "link_overwrite",
        "livecheck",
        "mirror",
        "no_autobump!",
        "option",
        "patch",
        "pour_bottle?",
        "resource",
        "revision",
        "service",
        "skip_clean",
        "stable",
        "test",
        "uses_from_macos",
        "version",
        "version_scheme",
    }
)


class CapturedAttributes:
    """Values recorded for the captured fields during a single evaluation."""

    def __init__(self):
        self._values: dict[str, str] = {}
        self._options: dict[str, dict[str, str]] = {}

    @staticmethod
    def _check(name: str) -> None:
        if name not in CAPTURED_FIELDS:
            raise KeyError(f"Not a captured field: {name!r}")

    def set_field(self, name: str, value: str) -> None:
        """Store a value, replacing any earlier one for the same field."""
        self._check(name)
        if name in self._values:
            logger.debug(f"Field '{name}' redeclared, later value wins")
        self._values[name] = value

    def get_field(self, name: str) -> str | None:
        """Return the stored value, or None if the field was never set."""
        self._check(name)
        return self._values.get(name)

    def has_field(self, name: str) -> bool:
        """Check if the field was declared during this evaluation."""
        self._check(name)
        return name in self._values

    def set_options(self, name: str, options: dict[str, str]) -> None:
        """Store trailing options (e.g. ``tag:``/``revision:`` on url) as raw text."""
        self._check(name)
        self._options[name] = dict(options)

    def get_options(self, name: str) -> dict[str, str]:
        """Return a copy of the options stored with the field's latest declaration."""
        self._check(name)
        return dict(self._options.get(name, {}))

    def __repr__(self) -> str:
        return f"CapturedAttributes({self._values!r})"


class CaptureEnvironment:
    """
    Receiver for declarations found in a filtered formula body.

    Captured fields are recorded into the attached CapturedAttributes.
    Known declarations without an extracted value are accepted and ignored,
    so widening the filter never makes evaluation fail on them.

    Example:
        >>> env = CaptureEnvironment()
        >>> env.declare("desc", "Library for manipulating PNG images")
        >>> env.declare("depends_on", "zlib")
        >>> env.attributes.get_field("desc")
        'Library for manipulating PNG images'
    """

    def __init__(self, attributes: CapturedAttributes | None = None):
        self.attributes = attributes if attributes is not None else CapturedAttributes()

    def declare(self, keyword: str, value: str, options: dict[str, str] | None = None) -> None:
        """
        Record one declaration.

        Args:
            keyword: Declaration name (e.g., "url")
            value: Evaluated string argument
            options: Trailing keyword options as raw text

        Raises:
            EvaluationError: If the keyword is neither captured nor a known no-op
        """
        if keyword in CAPTURED_FIELDS:
            self.attributes.set_field(keyword, value)
            # Options belong to one declaration; a redeclaration replaces them.
            self.attributes.set_options(keyword, options or {})
            return

        if keyword in NOOP_DECLARATIONS:
            logger.debug(f"Ignoring declaration '{keyword}'")
            return

        raise EvaluationError(
            f"undefined declaration '{keyword}'",
            context={"keyword": keyword},
        )
