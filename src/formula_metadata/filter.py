"""Declarative line filter for formula scripts.

Reduces a formula script to the single physical lines that declare metadata.
Installation steps, blocks, conditionals, method definitions and comments are
dropped without being parsed; a declaration split across lines is not kept.
"""

import logging

logger = logging.getLogger(__name__)

# Prefixes matched against the stripped line. The primary checksum must be a
# bare string literal; structured forms such as ``sha256 cellar: :any, ...``
# belong to bottle blocks and are excluded.
METADATA_PREFIXES: tuple[str, ...] = (
    "desc ",
    "homepage ",
    "url ",
    'sha256 "',
)


def is_metadata_line(line: str) -> bool:
    """Check if a physical line is a recognized metadata declaration."""
    return line.strip().startswith(METADATA_PREFIXES)


def filter_metadata_lines(source: str) -> str:
    """
    Keep only metadata declaration lines from a formula script.

    Retained lines keep their original content and relative order, so a
    later declaration of a field still overrides an earlier one.

    Args:
        source: Full formula script text

    Returns:
        Retained lines joined with newlines (empty string if none match)

    Example:
        >>> filter_metadata_lines('class Foo < Formula\\n  desc "Foo"\\n  def install; end\\nend')
        '  desc "Foo"'
    """
    # Only \n and \r\n end a line; other Unicode separators stay inside string literals.
    lines = [line.rstrip("\r") for line in source.split("\n")]
    kept = [line for line in lines if is_metadata_line(line)]

    logger.debug(f"Kept {len(kept)} of {len(lines)} lines as metadata declarations")
    return "\n".join(kept)
