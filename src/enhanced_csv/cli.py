"""Command-line interface for inspecting ECSV files."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from enhanced_csv.config.settings import ReaderConfig

app = typer.Typer(
    name="enhanced-csv",
    help="Inspect and read ECSV (Enhanced CSV) tables.",
    no_args_is_help=True,
)

console = Console()

FileArgument = Annotated[
    Path,
    typer.Argument(help="Path to the ECSV file.", exists=True, dir_okay=False),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to reader configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]
LogLevelOption = Annotated[
    str,
    typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
]


def _setup(config: Path | None, log_level: str) -> "ReaderConfig":
    from enhanced_csv.config.loader import load_config
    from enhanced_csv.utils.logging import configure_logging

    configure_logging(level=log_level)
    try:
        return load_config(config)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def schema(
    path: FileArgument,
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Show the resolved column schema of an ECSV file."""
    from enhanced_csv.errors import EnhancedCSVError
    from enhanced_csv.reader import read_schema

    reader_config = _setup(config, log_level)

    try:
        descriptors = read_schema(path, reader_config)
    except (EnhancedCSVError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title=f"Columns of {path.name}")
    table.add_column("Name", style="cyan")
    table.add_column("Datatype", style="green")
    table.add_column("Subtype")
    table.add_column("Unit", style="magenta")

    for d in descriptors:
        table.add_row(
            d.name,
            d.datatype.value,
            f"{d.element_type.value}[]" if d.is_array else "",
            d.unit.to_string() if d.unit is not None else "",
        )

    console.print(table)


@app.command()
def show(
    path: FileArgument,
    rows: Annotated[
        int,
        typer.Option("--rows", "-n", help="Number of rows to display.", min=1),
    ] = 10,
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Read an ECSV file and show its first rows."""
    from enhanced_csv.conversion.sinks import UNITS_ATTR, dataframe_sink
    from enhanced_csv.errors import EnhancedCSVError
    from enhanced_csv.reader import read

    reader_config = _setup(config, log_level)

    try:
        df = read(dataframe_sink, path, config=reader_config)
    except (EnhancedCSVError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    units = df.attrs.get(UNITS_ATTR, {})
    table = Table(title=f"{path.name} ({len(df)} rows)")
    for col in df.columns:
        header = f"{col} [{units[col]}]" if col in units else str(col)
        table.add_column(escape(header), overflow="fold")

    for _, record in df.head(rows).iterrows():
        table.add_row(*(escape(str(value)) for value in record))

    console.print(table)
    if len(df) > rows:
        console.print(f"[dim]... {len(df) - rows} more rows[/dim]")


@app.command()
def version() -> None:
    """Show version information."""
    from enhanced_csv import __version__

    console.print(f"enhanced-csv version {__version__}")


if __name__ == "__main__":
    app()
