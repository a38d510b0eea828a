"""
Row tokenization for the ECSV data section.

pandas does the delimiter and quote handling; every cell is kept as text so
that typing is decided by the header schema alone.
"""

import io
from typing import Any

import numpy as np
import pandas as pd

from enhanced_csv.errors import SchemaError
from enhanced_csv.utils.logging import get_logger

log = get_logger(__name__)

COMMENT_MARKER = "#"

RawColumn = np.ndarray


def _column_names(first_row: pd.Series) -> list[str]:
    names = [str(v) for v in first_row]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        msg = f"Duplicate column names in the data section: {duplicates}"
        raise SchemaError(msg)
    return names


def tokenize_rows(
    lines: list[str],
    delimiter: str = " ",
    missing_values: list[str] | None = None,
    **options: Any,
) -> dict[str, RawColumn]:
    """
    Split data lines into raw text columns.

    The first non-comment line holds the column names and fixes the row
    width. Lines starting with ``#`` are skipped anywhere in the data
    section. Rows with more fields than there are names are rejected; rows
    with fewer are padded with missing values.

    Args:
        lines: Data section lines, starting right after the header.
        delimiter: Single-character field delimiter.
        missing_values: Cell texts that mark a missing value.
        **options: Extra ``pandas.read_csv`` keyword arguments; they override
            the defaults used here.

    Returns:
        Ordered mapping from column name to an object array of ``str | None``.

    Raises:
        SchemaError: If pandas cannot tokenize the data section, a row is
            wider than the names row, or a column name repeats.
    """
    data_lines = [line for line in lines if not line.startswith(COMMENT_MARKER)]
    if not any(line.strip() for line in data_lines):
        log.debug("Empty data section")
        return {}

    # Names are read as a plain row so the names row fixes the width; with a
    # header row pandas would turn one extra field per line into an index
    read_options: dict[str, Any] = {
        "sep": delimiter,
        "header": None,
        "dtype": str,
        "na_filter": False,
        "skip_blank_lines": True,
        "on_bad_lines": "error",
    }
    read_options.update(options)
    if read_options.get("nrows") is not None:
        # nrows counts data rows; the names row is read as one more
        read_options["nrows"] += 1

    try:
        df = pd.read_csv(io.StringIO("\n".join(data_lines)), **read_options)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        msg = f"Cannot tokenize data section: {e}"
        raise SchemaError(msg) from e

    names = _column_names(df.iloc[0])
    rows = df.iloc[1:]
    missing = set(missing_values if missing_values is not None else [""])
    log.debug("Tokenized rows", rows=len(rows), columns=names)

    columns: dict[str, RawColumn] = {}
    for name, position in zip(names, df.columns, strict=True):
        values = [
            None if pd.isna(v) or v in missing else str(v) for v in rows[position]
        ]
        columns[name] = np.array(values, dtype=object)
    return columns
