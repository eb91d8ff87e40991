"""Class identifier derivation from formula file names.

A formula file declares one class whose name follows from its file stem:
``libpng.rb`` declares ``Libpng`` and ``lib-png.rb`` declares ``LibPng``.
"""

from pathlib import Path

from .exceptions import InvalidIdentifierError


def derive_identifier(path: Path | str) -> str:
    """
    Derive the class identifier a formula script declares from its path.

    The file stem is split on ``-``; each non-empty segment gets its first
    character uppercased with the rest kept verbatim, and the segments are
    joined without a separator.

    Args:
        path: Path to the formula file (only the name is used)

    Returns:
        Non-empty identifier (e.g., "A2ps" for a2ps.rb, "LibPng" for lib-png.rb)

    Raises:
        InvalidIdentifierError: If the stem is empty or consists only of separators

    Example:
        >>> derive_identifier(Path("Formula/a/a2ps.rb"))
        'A2ps'
    """
    stem = Path(path).stem
    identifier = "".join(segment[0].upper() + segment[1:] for segment in stem.split("-") if segment)

    if not identifier:
        raise InvalidIdentifierError(
            f"Cannot derive a class identifier from file name: {Path(path).name!r}",
            context={"path": str(path), "stem": stem},
        )

    return identifier
