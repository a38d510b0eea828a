"""
ECSV header schema parsing.

The header text is YAML. Producers may emit column metadata as an ordered
mapping (``!!omap``); HeaderLoader flattens those into a single dict so the
schema can be validated with plain Pydantic models.
"""

from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from enhanced_csv.errors import SchemaError
from enhanced_csv.ingestion.header import Source, extract_header, read_lines
from enhanced_csv.utils.logging import get_logger

log = get_logger(__name__)

OMAP_TAG = "tag:yaml.org,2002:omap"
DEFAULT_DELIMITER = " "


class HeaderLoader(yaml.SafeLoader):
    """SafeLoader that reads ``!!omap`` sequences as one merged mapping."""


def _construct_merged_omap(loader: HeaderLoader, node: yaml.Node) -> dict[Any, Any]:
    """Merge a sequence of mappings; later keys override earlier ones."""
    if not isinstance(node, yaml.SequenceNode):
        msg = f"expected a sequence of mappings for !!omap, found {node.id}"
        raise yaml.constructor.ConstructorError(None, None, msg, node.start_mark)

    merged: dict[Any, Any] = {}
    for item in loader.construct_sequence(node, deep=True):
        if not isinstance(item, dict):
            msg = f"expected a mapping inside !!omap, found {type(item).__name__}"
            raise yaml.constructor.ConstructorError(None, None, msg, node.start_mark)
        merged.update(item)
    return merged


# Registered on the subclass only; PyYAML's own loaders are left untouched
HeaderLoader.add_constructor(OMAP_TAG, _construct_merged_omap)


class ColumnSpecRaw(BaseModel):
    """One entry of the header's ``datatype`` list, before resolution."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(description="Column name as it appears in the data section")
    datatype: str = Field(description="Primitive datatype keyword")
    subtype: str | None = Field(
        default=None, description="Element type of an array encoded as JSON text"
    )
    unit: str | None = Field(default=None, description="Physical unit string")


class HeaderSchema(BaseModel):
    """Validated ECSV header: delimiter plus ordered column specs."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    delimiter: str = Field(default=DEFAULT_DELIMITER, description="Field delimiter")
    columns: list[ColumnSpecRaw] = Field(
        default_factory=list, alias="datatype", description="Ordered column specs"
    )
    meta: Any = Field(
        default=None, description="Table metadata, carried but not interpreted"
    )

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Ensure the delimiter is a single character."""
        if len(v) != 1:
            msg = f"delimiter must be a single character, got: {v!r}"
            raise ValueError(msg)
        return v

    @property
    def column_names(self) -> list[str]:
        """Declared column names in order."""
        return [c.name for c in self.columns]


def load_header_text(text: str) -> dict[str, Any]:
    """
    Parse header YAML into a mapping.

    Args:
        text: Schema text with comment prefixes already stripped.

    Returns:
        The parsed mapping; empty text gives an empty dict.

    Raises:
        SchemaError: If the text is not valid YAML or not a mapping.
    """
    try:
        data = yaml.load(text, Loader=HeaderLoader)  # noqa: S506
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" at line {mark.line + 1}, column {mark.column + 1}" if mark else ""
        msg = f"Malformed header schema{where}: {e}"
        raise SchemaError(msg) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Header schema must be a mapping, got {type(data).__name__}"
        raise SchemaError(msg)
    return data


def parse_header(source: Source) -> dict[str, Any]:
    """
    Read the header of an ECSV source and return its schema mapping.

    Args:
        source: File path or open text stream.

    Returns:
        The header mapping as parsed from YAML.
    """
    block = extract_header(read_lines(source))
    return load_header_text(block.text)


def parse_schema(mapping: dict[str, Any]) -> HeaderSchema:
    """
    Validate a header mapping.

    Args:
        mapping: Parsed header YAML.

    Returns:
        HeaderSchema with delimiter and column specs.

    Raises:
        SchemaError: If required keys are missing or have the wrong shape.
    """
    if not mapping:
        return HeaderSchema()

    if "datatype" not in mapping:
        msg = "Header schema is missing the required 'datatype' key"
        raise SchemaError(msg)

    try:
        schema = HeaderSchema.model_validate(mapping)
    except ValidationError as e:
        msg = f"Invalid header schema: {e}"
        raise SchemaError(msg) from e

    log.debug(
        "Parsed header schema",
        columns=schema.column_names,
        delimiter=schema.delimiter,
    )
    return schema
