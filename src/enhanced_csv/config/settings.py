"""
Typed reader configuration using Pydantic.

Everything that may vary between reads lives here; format constants
(comment prefixes, version marker) stay with the code that parses them.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

# astropy.units submodules that may be enabled while parsing unit strings
KNOWN_UNIT_MODULES: frozenset[str] = frozenset({"imperial", "cds", "misc", "photometric"})


class ReaderConfig(BaseModel):
    """Options controlling how ECSV files are read."""

    model_config = ConfigDict(frozen=True)

    max_workers: int = Field(
        default=1,
        ge=1,
        description="Threads used to convert columns (1 = sequential)",
    )
    missing_values: list[str] = Field(
        default_factory=lambda: [""],
        description="Cell texts treated as missing by the row tokenizer",
    )
    unit_modules: list[str] = Field(
        default_factory=lambda: ["imperial"],
        description="Extra astropy.units modules enabled during unit parsing",
    )

    @field_validator("unit_modules")
    @classmethod
    def validate_unit_modules(cls, v: list[str]) -> list[str]:
        """Reject unit modules astropy does not ship."""
        unknown = sorted(set(v) - KNOWN_UNIT_MODULES)
        if unknown:
            msg = (
                f"Unknown unit modules: {unknown}. "
                f"Available: {sorted(KNOWN_UNIT_MODULES)}"
            )
            raise ValueError(msg)
        return v
