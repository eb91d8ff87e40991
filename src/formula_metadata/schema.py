"""Formula record schema - metadata extracted from one formula script."""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class FormulaRecord(BaseModel):
    """
    Package metadata extracted from a formula script.

    ``name`` is the file stem, not the derived class identifier. Optional fields
    are set only when the corresponding declaration was found and accepted.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str | None = None
    homepage: str | None = None
    url: str | None = None
    sha256: str | None = None

    # Not extracted yet; always empty.
    dependencies: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json")
