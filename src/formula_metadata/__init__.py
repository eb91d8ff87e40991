"""formula-metadata - Extract package metadata from formula scripts without running them.

Public API: parse_formula() for one path, parse_formulas() / FormulaParser for
batches and injected read settings, plus the pipeline stages they are built from.
"""

from .capture import CapturedAttributes
from .capture import CaptureEnvironment
from .evaluator import EvaluatedFormula
from .evaluator import evaluate
from .exceptions import EvaluationError
from .exceptions import FormulaError
from .exceptions import FormulaIOError
from .exceptions import InvalidIdentifierError
from .filter import filter_metadata_lines
from .identifier import derive_identifier
from .parser import FormulaParser
from .parser import parse_formula
from .parser import parse_formulas
from .retriever import retrieve_attributes
from .schema import FormulaRecord

__all__ = [
    # Parsing
    "FormulaParser",
    "parse_formula",
    "parse_formulas",
    # Records
    "FormulaRecord",
    # Pipeline stages
    "derive_identifier",
    "filter_metadata_lines",
    "CapturedAttributes",
    "CaptureEnvironment",
    "EvaluatedFormula",
    "evaluate",
    "retrieve_attributes",
    # Exceptions
    "FormulaError",
    "FormulaIOError",
    "InvalidIdentifierError",
    "EvaluationError",
]

__version__ = "0.1.0"
