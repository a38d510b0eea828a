"""
Header extraction for ECSV sources.

The header is the run of comment lines before the first data line. The whole
source is materialized as a list of lines so that the row tokenizer can start
at exactly the line where header scanning stopped.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from enhanced_csv.utils.logging import get_logger

log = get_logger(__name__)

VERSION_MARKER = "# %ECSV"
SCHEMA_PREFIX = "# "
IGNORED_PREFIX = "##"

Source = str | Path | TextIO


@dataclass(frozen=True)
class HeaderBlock:
    """Schema text of a header and where the data section starts."""

    text: str
    data_start: int
    version: str | None = None


def read_lines(source: Source) -> list[str]:
    """
    Materialize a source as a list of lines without line endings.

    Args:
        source: File path or an open text stream.

    Returns:
        All lines of the source.

    Raises:
        FileNotFoundError: If a path does not exist.
    """
    if hasattr(source, "read"):
        content = source.read()  # type: ignore[union-attr]
    else:
        path = Path(source)  # type: ignore[arg-type]
        if not path.exists():
            msg = f"ECSV file not found: {path}"
            raise FileNotFoundError(msg)
        content = path.read_text(encoding="utf-8")
    return content.splitlines()


def extract_header(lines: list[str]) -> HeaderBlock:
    """
    Collect schema text from leading header lines.

    Lines starting with the version marker and ``##`` comment lines are
    dropped; ``# `` lines contribute their text. The first other line ends the
    header and is not consumed.

    Args:
        lines: Source lines without line endings.

    Returns:
        HeaderBlock with the joined schema text and the data start index.
    """
    schema_lines: list[str] = []
    version = None
    data_start = len(lines)

    for i, line in enumerate(lines):
        if line.startswith(VERSION_MARKER):
            version = line[len(VERSION_MARKER) :].strip() or None
        elif line.startswith(SCHEMA_PREFIX):
            schema_lines.append(line[len(SCHEMA_PREFIX) :])
        elif line.startswith(IGNORED_PREFIX):
            continue
        else:
            data_start = i
            break

    log.debug(
        "Extracted header",
        schema_lines=len(schema_lines),
        data_start=data_start,
        version=version,
    )
    return HeaderBlock(text="\n".join(schema_lines), data_start=data_start, version=version)
