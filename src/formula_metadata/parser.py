"""Formula parser - extract a FormulaRecord from a formula script path.

Pipeline: path -> identifier; file text -> filtered declarations;
(identifier, declarations) -> evaluated formula -> FormulaRecord.

Callers own file discovery and what happens to the records; this module
only turns given paths into records.
"""

import logging
from pathlib import Path

from .evaluator import evaluate
from .exceptions import FormulaError
from .exceptions import FormulaIOError
from .filter import filter_metadata_lines
from .identifier import derive_identifier
from .retriever import retrieve_attributes
from .schema import FormulaRecord

logger = logging.getLogger(__name__)


class FormulaParser:
    """
    Extract metadata records from formula scripts (with injected read policy).

    Each parse builds its own capture record, so one parser can be shared
    between threads and files whose names collide on the same identifier
    never see each other's values.
    """

    def __init__(self, encoding: str = "utf-8"):
        """Initialize parser.

        Args:
            encoding: Text encoding used to read formula files

        Example:
            >>> parser = FormulaParser()
            >>> record = parser.parse(Path("Formula/l/libpng.rb"))
        """
        self.encoding = encoding

    def read(self, path: Path) -> str:
        """Read formula text, mapping any read failure to FormulaIOError."""
        try:
            return path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise FormulaIOError(
                f"Could not read formula file {path}: {e}",
                context={"path": str(path)},
            ) from e

    def parse(self, path: Path | str) -> FormulaRecord:
        """
        Parse one formula script into a record.

        Args:
            path: Path to the formula file

        Returns:
            FormulaRecord with name set to the file stem

        Raises:
            InvalidIdentifierError: If the file name yields no identifier
            FormulaIOError: If the file cannot be read
            EvaluationError: If a retained declaration is malformed
        """
        path = Path(path)
        identifier = derive_identifier(path)
        source = self.read(path)

        filtered = filter_metadata_lines(source)
        try:
            handle = evaluate(identifier, filtered)
        except FormulaError as e:
            e.context.setdefault("path", str(path))
            raise

        record = FormulaRecord(name=path.stem, **retrieve_attributes(handle))
        logger.info(f"Parsed formula {record.name} ({identifier})")
        return record

    def parse_many(
        self, paths: list[Path] | list[str]
    ) -> tuple[list[FormulaRecord], list[tuple[Path, FormulaError]]]:
        """
        Parse several formula scripts, continuing past failures.

        Args:
            paths: Formula file paths, in the order they should be parsed

        Returns:
            Tuple of (records, failures) where failures pairs each failed path
            with the error it raised
        """
        records: list[FormulaRecord] = []
        failures: list[tuple[Path, FormulaError]] = []

        for path in map(Path, paths):
            try:
                records.append(self.parse(path))
            except FormulaError as e:
                logger.warning(f"Skipping {path}: {e.message}")
                failures.append((path, e))

        return records, failures


def parse_formula(path: Path | str) -> FormulaRecord:
    """Parse one formula script with default settings (see FormulaParser.parse)."""
    return FormulaParser().parse(path)


def parse_formulas(
    paths: list[Path] | list[str],
) -> tuple[list[FormulaRecord], list[tuple[Path, FormulaError]]]:
    """Parse several formula scripts with default settings (see FormulaParser.parse_many)."""
    return FormulaParser().parse_many(paths)
