"""
Ingestion layer: source materialization, header extraction, row tokenization.

The header scan and the row tokenizer share one materialized list of lines so
that the data section starts exactly where the header ends.
"""

from enhanced_csv.ingestion.header import HeaderBlock, extract_header, read_lines
from enhanced_csv.ingestion.rows import tokenize_rows

__all__ = [
    "HeaderBlock",
    "extract_header",
    "read_lines",
    "tokenize_rows",
]
