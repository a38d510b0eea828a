"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def test_data_dir(project_root: Path) -> Path:
    """Return the test data directory."""
    return project_root / "tests" / "data"


@pytest.fixture
def gaia_path(test_data_dir: Path) -> Path:
    """Gaia epoch photometry sample: int64, int32 and a float64 array column."""
    return test_data_dir / "gaia.ecsv"


@pytest.fixture
def mixed_path(test_data_dir: Path) -> Path:
    """Comma-delimited sample with missing values, bool arrays and units."""
    return test_data_dir / "mixed.ecsv"


@pytest.fixture
def simple_ecsv() -> str:
    """Small space-delimited ECSV document."""
    return "\n".join(
        [
            "# %ECSV 1.0",
            "# ---",
            "# datatype:",
            "# - {name: a, datatype: int8}",
            "# - {name: b, datatype: float64, unit: m}",
            "# - {name: c, datatype: string}",
            "a b c",
            "1 2.5 x",
            "2 3.5 y",
            "3 -1.0 z",
        ]
    )
