"""Evaluation of filtered formula declarations.

Each retained line is read as ``keyword "literal"`` with optional trailing
``, key: value`` options and an optional trailing comment. Only the string
literal is evaluated; everything else is kept as raw text or rejected.
No script code is ever executed, so there is no interpreter to share and
concurrent evaluations cannot observe each other's values.
"""

import logging
import re
from dataclasses import dataclass
from dataclasses import field

from .capture import CapturedAttributes
from .capture import CaptureEnvironment
from .exceptions import EvaluationError

logger = logging.getLogger(__name__)

_KEYWORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*[!?]?")
_OPTION_RE = re.compile(r"([A-Za-z_][A-Za-z0-9_]*):\s+(\S.*)", re.DOTALL)
_ROCKET_OPTION_RE = re.compile(r":?([A-Za-z_][A-Za-z0-9_]*)\s*=>\s*(\S.*)", re.DOTALL)
_SYMBOL_RE = re.compile(r":[A-Za-z_][A-Za-z0-9_]*[!?]?")
_HEX_RE = re.compile(r"[0-9A-Fa-f]+")
# Local variable assignment such as ``url = "..."`` inside an install block.
_ASSIGNMENT_RE = re.compile(r"(?:\|\||&&|[-+*/])?=(?![=~>])")

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "s": " ",
    "r": "\r",
    "e": "\x1b",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

_CLOSING = {"(": ")", "[": "]", "{": "}"}


@dataclass
class EvaluatedFormula:
    """Handle to an evaluated formula body: its identifier and captured values."""

    identifier: str
    attributes: CapturedAttributes = field(default_factory=CapturedAttributes)

    def get(self, name: str) -> str | None:
        """Return the captured value for a field (desc, homepage, url, sha256)."""
        return self.attributes.get_field(name)


def _read_hex(text: str, pos: int, max_len: int | None = None) -> tuple[str, int]:
    match = _HEX_RE.match(text, pos)
    if not match:
        return "", pos
    digits = match.group(0)
    if max_len is not None:
        digits = digits[:max_len]
    return digits, pos + len(digits)


def _codepoint(digits: str) -> str:
    value = int(digits, 16)
    if 0xD800 <= value <= 0xDFFF:
        raise ValueError(f"invalid Unicode codepoint (surrogate): U+{value:04X}")
    return chr(value)


def _read_escape(text: str, pos: int) -> tuple[str, int]:
    """Decode the escape sequence starting after a backslash at ``pos``."""
    ch = text[pos]

    if ch in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[ch], pos + 1

    if ch in "01234567":
        end = pos
        while end < len(text) and end - pos < 3 and text[end] in "01234567":
            end += 1
        return chr(int(text[pos:end], 8)), end

    if ch == "x":
        digits, end = _read_hex(text, pos + 1, max_len=2)
        if not digits:
            raise ValueError("invalid hex escape")
        return chr(int(digits, 16)), end

    if ch == "u":
        if text.startswith("{", pos + 1):
            close = text.find("}", pos + 2)
            if close == -1:
                raise ValueError("unterminated Unicode escape")
            codepoints = text[pos + 2 : close].split()
            if not codepoints or not all(_HEX_RE.fullmatch(cp) for cp in codepoints):
                raise ValueError("invalid Unicode escape")
            return "".join(_codepoint(cp) for cp in codepoints), close + 1
        digits, end = _read_hex(text, pos + 1, max_len=4)
        if len(digits) != 4:
            raise ValueError("invalid Unicode escape")
        return _codepoint(digits), end

    # Any other escaped character stands for itself (\\, \", \#, ...).
    return ch, pos + 1


def read_string_literal(text: str, pos: int = 0) -> tuple[str, int]:
    """
    Read a quoted string literal starting at ``text[pos]``.

    Double-quoted literals decode backslash escapes and reject ``#{...}``
    interpolation; single-quoted literals only unescape ``\\\\`` and ``\\'``.

    Args:
        text: Source text
        pos: Index of the opening quote

    Returns:
        Tuple of (decoded value, index just past the closing quote)

    Raises:
        ValueError: If the literal is malformed, unterminated or interpolated
    """
    quote = text[pos]
    if quote not in "\"'":
        raise ValueError("expected a string literal")

    chars: list[str] = []
    i = pos + 1
    while i < len(text):
        ch = text[i]

        if ch == quote:
            return "".join(chars), i + 1

        if ch == "\\":
            if i + 1 >= len(text):
                break
            if quote == "'":
                nxt = text[i + 1]
                chars.append(nxt if nxt in "\\'" else "\\" + nxt)
                i += 2
                continue
            decoded, i = _read_escape(text, i + 1)
            chars.append(decoded)
            continue

        if quote == '"' and ch == "#" and text.startswith("{", i + 1):
            raise ValueError("string interpolation cannot be evaluated")

        chars.append(ch)
        i += 1

    raise ValueError("unterminated string literal")


def _skip_string(text: str, pos: int) -> int:
    """Return the index just past the quoted string at ``text[pos]``, without decoding it."""
    quote = text[pos]
    i = pos + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    raise ValueError("unterminated string literal")


def _split_trailing(text: str) -> list[str]:
    """Split trailing options on top-level commas, stopping at a comment."""
    parts: list[str] = []
    stack: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            end = _skip_string(text, i)
            current.append(text[i:end])
            i = end
            continue
        if ch == "#" and not stack:
            break
        if ch in _CLOSING:
            stack.append(_CLOSING[ch])
        elif ch in ")]}":
            if not stack or stack.pop() != ch:
                raise ValueError(f"unbalanced '{ch}'")
        elif ch == "," and not stack:
            parts.append("".join(current))
            current = []
            i += 1
            continue
        current.append(ch)
        i += 1

    if stack:
        raise ValueError("unbalanced brackets")
    parts.append("".join(current))
    return parts


def parse_declaration(line: str) -> tuple[str, str | None, dict[str, str]]:
    """
    Parse one declaration line into its keyword, literal value and options.

    Args:
        line: A single retained line (surrounding whitespace allowed)

    Returns:
        Tuple of (keyword, value, options) where options maps option names
        to their raw, unevaluated text. value is None when the line carries
        nothing to capture: a symbol reference such as ``url :stable``, a
        hash-keyed checksum such as ``sha256 "..." => :catalina`` from an old
        bottle block, or a local assignment such as ``url = "..."``.

    Raises:
        ValueError: If the line is not ``keyword "literal"`` with optional
            ``, key: value`` options and trailing comment

    Example:
        >>> parse_declaration('  url "https://example.org/a.git", tag: "v1.0"')
        ('url', 'https://example.org/a.git', {'tag': '"v1.0"'})
    """
    text = line.strip()

    match = _KEYWORD_RE.match(text)
    if not match:
        raise ValueError("expected a declaration keyword")
    keyword = match.group(0)

    rest = text[match.end() :]
    if not rest[:1].isspace():
        raise ValueError(f"expected an argument after '{keyword}'")
    rest = rest.lstrip()

    if _ASSIGNMENT_RE.match(rest):
        return keyword, None, {}

    symbol = _SYMBOL_RE.match(rest)
    if symbol:
        value, end = None, symbol.end()
    elif rest and rest[0] in "\"'":
        value, end = read_string_literal(rest)
    else:
        raise ValueError(f"'{keyword}' expects a string literal argument")
    trailing = rest[end:].strip()

    options: dict[str, str] = {}
    if not trailing or trailing.startswith("#"):
        return keyword, value, options

    if trailing.startswith("=>"):
        return keyword, None, options

    if not trailing.startswith(","):
        raise ValueError(f"unexpected content after argument: {trailing!r}")

    parts = [part.strip() for part in _split_trailing(trailing[1:])]
    # A trailing comma continues the call on a following line the filter dropped.
    if parts[-1] == "":
        parts.pop()

    for part in parts:
        option = _OPTION_RE.fullmatch(part) or _ROCKET_OPTION_RE.fullmatch(part)
        if not option:
            raise ValueError(f"malformed option: {part!r}")
        options[option.group(1)] = option.group(2).strip()

    return keyword, value, options


def evaluate(identifier: str, filtered_source: str) -> EvaluatedFormula:
    """
    Evaluate filtered declarations into a fresh capture record.

    Args:
        identifier: Class identifier the formula declares
        filtered_source: Output of filter_metadata_lines

    Returns:
        EvaluatedFormula holding the values captured for this call only

    Raises:
        EvaluationError: If any line is malformed, with the line number and
            text in its context
    """
    handle = EvaluatedFormula(identifier=identifier)
    environment = CaptureEnvironment(handle.attributes)

    for line_number, line in enumerate(filtered_source.split("\n"), start=1):
        if not line.strip():
            continue

        context = {"identifier": identifier, "line_number": line_number, "line": line}
        try:
            keyword, value, options = parse_declaration(line)
        except ValueError as e:
            raise EvaluationError(f"{identifier}:{line_number}: {e}", context=context) from e

        if value is None:
            logger.debug(f"{identifier}:{line_number}: '{keyword}' has no capturable value, keeping earlier value")
            continue

        try:
            environment.declare(keyword, value, options)
        except EvaluationError as e:
            raise EvaluationError(f"{identifier}:{line_number}: {e.message}", context=context) from e

    logger.debug(f"Evaluated {identifier}: {handle.attributes!r}")
    return handle
