"""Retrieval of captured values from an evaluated formula."""

import logging

from .evaluator import EvaluatedFormula

logger = logging.getLogger(__name__)

# Record attribute -> captured declaration name
RETRIEVED_ATTRIBUTES: dict[str, str] = {
    "description": "desc",
    "homepage": "homepage",
    "url": "url",
    "sha256": "sha256",
}


def retrieve_attributes(handle: EvaluatedFormula) -> dict[str, str | None]:
    """
    Read each captured field from an evaluated formula.

    A formula may omit any field, so a missing value or a failing lookup
    yields None instead of an error.

    Args:
        handle: Result of evaluate()

    Returns:
        Dict with keys description, homepage, url and sha256
    """
    attributes: dict[str, str | None] = {}
    for attribute, declaration in RETRIEVED_ATTRIBUTES.items():
        try:
            attributes[attribute] = handle.get(declaration)
        except Exception as e:
            logger.debug(f"Could not read '{declaration}' from {handle.identifier}: {e}")
            attributes[attribute] = None
    return attributes
