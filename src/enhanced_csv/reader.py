"""
ECSV reading entry points.

A read materializes the source once, resolves the header schema completely,
then tokenizes and converts the data section. It either returns the sink's
table or raises; no partially converted table is ever produced.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from enhanced_csv.config.settings import ReaderConfig
from enhanced_csv.conversion.columns import TypedColumn, convert_columns
from enhanced_csv.errors import SchemaError
from enhanced_csv.ingestion.header import Source, extract_header, read_lines
from enhanced_csv.ingestion.rows import tokenize_rows
from enhanced_csv.schemas.columns import ColumnDescriptor, resolve_columns
from enhanced_csv.schemas.header import HeaderSchema, load_header_text, parse_schema
from enhanced_csv.utils.logging import get_logger, log_context

log = get_logger(__name__)

T = TypeVar("T")

Sink = Callable[[dict[str, TypedColumn]], T]


def _source_label(source: Source) -> str:
    if isinstance(source, str | Path):
        return str(source)
    return getattr(source, "name", type(source).__name__)


def _check_column_order(header: HeaderSchema, tokenized: list[str]) -> None:
    declared = header.column_names
    if declared != tokenized:
        msg = (
            "Column names in the data section do not match the header schema: "
            f"declared {declared}, found {tokenized}"
        )
        raise SchemaError(msg)


def read_schema(
    source: Source, config: ReaderConfig | None = None
) -> list[ColumnDescriptor]:
    """
    Resolve the column descriptors of an ECSV source without reading rows.

    Args:
        source: File path or open text stream.
        config: Reader options; defaults when None.

    Returns:
        Column descriptors in declared order.
    """
    block = extract_header(read_lines(source))
    header = parse_schema(load_header_text(block.text))
    return resolve_columns(header, config)


def read(
    sink: Sink[T],
    source: Source,
    *,
    config: ReaderConfig | None = None,
    **tokenizer_options: Any,
) -> T:
    """
    Read an ECSV file into the table type produced by ``sink``.

    Args:
        sink: Callable receiving a name -> typed column mapping in declared
            order, e.g. ``dict``, ``dataframe_sink`` or ``astropy.table.QTable``.
        source: File path or open text stream.
        config: Reader options; defaults when None.
        **tokenizer_options: Passed on to ``pandas.read_csv``.

    Returns:
        Whatever ``sink`` returns.

    Raises:
        FileNotFoundError: If a path does not exist.
        SchemaError: On malformed headers or header/data mismatches.
        ConversionError: If any value cannot be converted.
    """
    config = config or ReaderConfig()

    with log_context(source=_source_label(source)):
        lines = read_lines(source)
        block = extract_header(lines)
        header = parse_schema(load_header_text(block.text))
        descriptors = resolve_columns(header, config)

        raw_columns = tokenize_rows(
            lines[block.data_start :],
            delimiter=header.delimiter,
            missing_values=config.missing_values,
            **tokenizer_options,
        )
        _check_column_order(header, list(raw_columns))

        columns = convert_columns(raw_columns, descriptors, max_workers=config.max_workers)
        log.info(
            "Read ECSV table",
            columns=len(columns),
            rows=len(next(iter(raw_columns.values()))) if raw_columns else 0,
        )
        return sink(columns)
