"""End-to-end tests for reading ECSV files."""

import io
from pathlib import Path

import astropy.units as u
import numpy as np
import pytest
from astropy.utils.masked import Masked

from enhanced_csv import ConversionError, SchemaError, UnitWarning, read, read_schema
from enhanced_csv.config import ReaderConfig
from enhanced_csv.ingestion.rows import tokenize_rows
from enhanced_csv.schemas.columns import PrimitiveType


class TestReadGaia:
    """Tests against the Gaia epoch photometry sample."""

    def test_example_gaia(self, gaia_path: Path) -> None:
        """Test the documented Gaia example end to end."""
        tbl = read(dict, gaia_path)

        assert list(tbl) == ["solution_id", "n_transits", "g_transit_flux"]
        assert len(tbl["solution_id"]) == 5
        assert np.all(tbl["solution_id"] == 375316653866487564)
        assert tbl["solution_id"].dtype == np.int64
        assert tbl["n_transits"].tolist() == [25, 21, 23, 26, 25]
        assert tbl["n_transits"].dtype == np.int32

        flux = tbl["g_transit_flux"]
        assert flux[1][4] == 788.8084742392512 / u.s
        assert flux[1].unit == u.Unit("1/s")
        assert np.isnan(flux[1][5].value)

    def test_masked_element_in_array(self, gaia_path: Path) -> None:
        """Test that a null inside an array masks only that element."""
        flux = read(dict, gaia_path)["g_transit_flux"]

        assert isinstance(flux[2], Masked)
        assert flux[2].mask.tolist() == [False, False, True, False]
        assert not isinstance(flux[0], Masked)

    def test_read_from_stream(self, gaia_path: Path) -> None:
        """Test that an open text stream works like a path."""
        with gaia_path.open(encoding="utf-8") as f:
            tbl = read(dict, f)
        assert tbl["n_transits"].tolist() == [25, 21, 23, 26, 25]

    def test_parallel_conversion(self, gaia_path: Path) -> None:
        """Test that column-parallel reads give the same result."""
        tbl = read(dict, gaia_path, config=ReaderConfig(max_workers=3))

        assert list(tbl) == ["solution_id", "n_transits", "g_transit_flux"]
        assert tbl["g_transit_flux"][1][4] == 788.8084742392512 / u.s

    def test_read_schema(self, gaia_path: Path) -> None:
        """Test resolving descriptors without reading rows."""
        descriptors = read_schema(gaia_path)

        assert [d.name for d in descriptors] == ["solution_id", "n_transits", "g_transit_flux"]
        assert descriptors[2].element_type is PrimitiveType.FLOAT64
        assert descriptors[2].unit == u.Unit("1/s")


class TestReadMixed:
    """Tests against the comma-delimited sample with missing values."""

    def _read(self, path: Path) -> dict:
        with pytest.warns(UnitWarning, match="/beam"):
            return read(dict, path)

    def test_types_and_missing(self, mixed_path: Path) -> None:
        """Test scalar columns with and without missing values."""
        tbl = self._read(mixed_path)

        assert tbl["id"].dtype == np.uint16
        assert tbl["id"].tolist() == [1, 2, 3]
        assert tbl["label"].tolist() == ["alpha", "beta gamma", None]
        assert tbl["ok"].tolist() == [True, False, True]

    def test_unit_with_unsupported_token(self, mixed_path: Path) -> None:
        """Test that Jy/beam degrades to Jy on a masked float32 column."""
        flux = self._read(mixed_path)["flux"]

        assert isinstance(flux, Masked)
        assert flux.unit == u.Jy
        assert flux.mask.tolist() == [False, True, False]
        assert flux.unmasked.dtype == np.float32
        assert flux.unmasked[2] == 2.25 * u.Jy

    def test_bool_and_int_arrays(self, mixed_path: Path) -> None:
        """Test JSON and textual bool arrays plus int arrays with nulls."""
        tbl = self._read(mixed_path)

        assert tbl["flags"][0].tolist() == [True, False]
        assert tbl["flags"][1].tolist() == [True, False, True]
        assert tbl["flags"][2] is None
        assert tbl["counts"][0].dtype == np.int16
        assert len(tbl["counts"][1]) == 0
        assert tbl["counts"][2].mask.tolist() == [False, True]


class TestReadErrors:
    """Tests for fatal read errors."""

    def test_column_order_mismatch(self) -> None:
        """Test that reordered data columns fail the read."""
        text = "# datatype:\n# - {name: a, datatype: int64}\n# - {name: b, datatype: int64}\nb a\n1 2\n"
        sink_calls: list[dict] = []

        with pytest.raises(SchemaError, match="do not match the header schema"):
            read(sink_calls.append, io.StringIO(text))
        assert sink_calls == []

    def test_column_count_mismatch(self) -> None:
        """Test that extra data columns fail the read."""
        text = "# datatype:\n# - {name: a, datatype: int64}\na b\n1 2\n"
        with pytest.raises(SchemaError, match=r"found \['a', 'b'\]"):
            read(dict, io.StringIO(text))

    def test_trailing_delimiter_on_rows(self) -> None:
        """Test that a trailing delimiter on every row fails instead of shifting values."""
        text = "# datatype:\n# - {name: a, datatype: int64}\n# - {name: b, datatype: int64}\na b\n1 2 \n3 4 \n"
        with pytest.raises(SchemaError):
            read(dict, io.StringIO(text))

    def test_extra_leading_field_on_rows(self) -> None:
        """Test that rows one field wider than the names row fail the read."""
        text = "# datatype:\n# - {name: a, datatype: int64}\n# - {name: b, datatype: int64}\na b\n9 1 2\n9 3 4\n"
        sink_calls: list[dict] = []

        with pytest.raises(SchemaError):
            read(sink_calls.append, io.StringIO(text))
        assert sink_calls == []

    def test_unknown_datatype(self) -> None:
        """Test that unknown datatype keywords fail before rows are read."""
        text = "# datatype:\n# - {name: a, datatype: decimal}\na\n1\n"
        with pytest.raises(SchemaError, match="unknown datatype 'decimal'"):
            read(dict, io.StringIO(text))

    def test_two_dimensional_subtype(self) -> None:
        """Test that fixed-shape array subtypes are rejected."""
        text = "# datatype:\n# - {name: a, datatype: string, subtype: 'int64[2,2]'}\na\n\"[[1,2],[3,4]]\"\n"
        with pytest.raises(SchemaError, match="only 1-D variable-length"):
            read(dict, io.StringIO(text))

    def test_conversion_error(self) -> None:
        """Test that a bad value aborts the read with column context."""
        text = "# datatype:\n# - {name: a, datatype: int8}\na\n1\n1000\n"
        with pytest.raises(ConversionError, match="Column 'a'"):
            read(dict, io.StringIO(text))

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read(dict, tmp_path / "nope.ecsv")


class TestReadEdgeCases:
    """Tests for less common layouts."""

    def test_empty_source(self) -> None:
        """Test that an empty source yields an empty table."""
        assert read(dict, io.StringIO("")) == {}

    def test_header_only(self) -> None:
        """Test that a header without data or columns yields an empty table."""
        assert read(dict, io.StringIO("# %ECSV 1.0\n# ---\n")) == {}

    def test_comment_lines_in_data(self, simple_ecsv: str) -> None:
        """Test that # lines inside the data section are skipped."""
        lines = simple_ecsv.split("\n")
        lines.insert(8, "# skipped")
        tbl = read(dict, io.StringIO("\n".join(lines)))

        assert tbl["a"].tolist() == [1, 2, 3]
        assert tbl["a"].dtype == np.int8

    def test_first_data_line_not_lost(self, simple_ecsv: str) -> None:
        """Test that the data section starts exactly after the header."""
        tbl = read(dict, io.StringIO(simple_ecsv))

        assert tbl["c"].tolist() == ["x", "y", "z"]
        assert tbl["b"][0] == 2.5 * u.m

    def test_tokenizer_options(self, simple_ecsv: str) -> None:
        """Test that extra options reach pandas.read_csv."""
        tbl = read(dict, io.StringIO(simple_ecsv), nrows=2)
        assert tbl["a"].tolist() == [1, 2]

    def test_custom_missing_values(self) -> None:
        """Test configurable missing markers."""
        text = "# datatype:\n# - {name: a, datatype: float64}\na\n1.0\nN/A\n"
        tbl = read(dict, io.StringIO(text), config=ReaderConfig(missing_values=["", "N/A"]))

        assert tbl["a"].mask.tolist() == [False, True]


class TestTokenizeRows:
    """Tests for splitting the data section into raw text columns."""

    def test_quoted_field_keeps_delimiter(self) -> None:
        """Test that quoted cells may contain the delimiter."""
        cols = tokenize_rows(["a b", '"x y" 2'])

        assert cols["a"].tolist() == ["x y"]
        assert cols["b"].tolist() == ["2"]

    def test_comments_and_missing_cells(self) -> None:
        """Test that # lines are skipped and empty cells become None."""
        cols = tokenize_rows(["a,b", "1,", "# note", "3,4"], delimiter=",")

        assert cols["a"].tolist() == ["1", "3"]
        assert cols["b"].tolist() == [None, "4"]

    def test_custom_missing_values(self) -> None:
        """Test that configured missing markers replace the default."""
        cols = tokenize_rows(["a b", "NA 1", "'' 2"], missing_values=["NA"])

        assert cols["a"].tolist() == [None, "''"]

    def test_empty_section(self) -> None:
        """Test that a data section without lines yields no columns."""
        assert tokenize_rows([]) == {}
        assert tokenize_rows(["# only a comment", "   "]) == {}

    def test_ragged_rows(self) -> None:
        """Test that rows with too many fields are a schema error."""
        with pytest.raises(SchemaError, match="Cannot tokenize"):
            tokenize_rows(["a b", "1 2", "1 2 3 4"])

    def test_trailing_delimiter_rejected(self) -> None:
        """Test that a trailing delimiter does not shift values between columns."""
        with pytest.raises(SchemaError, match="Cannot tokenize"):
            tokenize_rows(["a b", "1 2 ", "3 4 "])

    def test_extra_leading_field_rejected(self) -> None:
        """Test that one extra field on every row is not taken as an index."""
        with pytest.raises(SchemaError, match="Cannot tokenize"):
            tokenize_rows(["a b", "9 1 2", "9 3 4"])

    def test_short_rows_padded_with_missing(self) -> None:
        """Test that rows narrower than the names row get missing cells."""
        cols = tokenize_rows(["a b c", "1 2 3", "4"])

        assert cols["a"].tolist() == ["1", "4"]
        assert cols["c"].tolist() == ["3", None]

    def test_names_row_not_subject_to_missing_markers(self) -> None:
        """Test that a column name equal to a missing marker is kept."""
        cols = tokenize_rows(["NA b", "NA 1"], missing_values=["NA"])

        assert list(cols) == ["NA", "b"]
        assert cols["NA"].tolist() == [None]

    def test_duplicate_names(self) -> None:
        """Test that repeated column names are a schema error."""
        with pytest.raises(SchemaError, match="Duplicate column names"):
            tokenize_rows(["a a", "1 2"])

    def test_nrows_counts_data_rows(self) -> None:
        """Test that nrows limits data rows, not the names row."""
        cols = tokenize_rows(["a", "1", "2", "3"], nrows=2)

        assert cols["a"].tolist() == ["1", "2"]
