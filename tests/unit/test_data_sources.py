"""
Unit tests for the raw dataset sources.
"""

import pytest

from eu_paper_demand.data_sources import (
    DataSourceManager, DataSourceType, DatasetNotFoundError, EUCountryTable,
    FAOSTATPaperSource, SchemaError, UnsupportedFormatError,
    WorldBankMacroSource, read_table,
)


class TestReadTable:
    """Test suffix-based reading."""

    def test_pickle_csv_parquet(self, tmp_path, eu_countries):
        eu_countries.to_pickle(tmp_path / "eu.pkl")
        eu_countries.to_csv(tmp_path / "eu.csv", index=False)
        eu_countries.to_parquet(tmp_path / "eu.parquet", index=False)

        for name in ("eu.pkl", "eu.csv", "eu.parquet"):
            table = read_table(tmp_path / name)
            assert table["Country"].tolist() == ["Germany", "Slovakia", "Sweden"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(DatasetNotFoundError):
            read_table(tmp_path / "absent.pkl")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "table.rdata"
        path.write_bytes(b"RDX2")

        with pytest.raises(UnsupportedFormatError):
            read_table(path)


class TestSources:
    """Test the typed sources."""

    def test_load_is_cached(self, raw_files):
        source = WorldBankMacroSource(raw_files / "gdp_deflator_exchange_rate_population.pkl")

        first = source.load()
        first["Country"] = "changed"
        second = source.load()

        assert source.is_loaded
        assert "changed" not in set(second["Country"])
        assert source.last_load.row_count == len(second)

    def test_missing_columns_raise_schema_error(self, tmp_path, paper_table):
        path = tmp_path / "paper.pkl"
        paper_table.drop(columns=["Export_Value"]).to_pickle(path)

        with pytest.raises(SchemaError, match="Export_Value"):
            FAOSTATPaperSource(path).load()

    def test_dataset_info(self, raw_files):
        source = FAOSTATPaperSource(raw_files / "paper_and_paperboard.pkl")

        assert source.test_connection()
        info = source.get_dataset_info()
        assert info["source_type"] == "faostat"
        assert info["loaded"] is False

        source.load()
        assert "rows" in source.get_dataset_info()


class TestEUCountryTable:
    """Test the EU reference table."""

    def test_load(self, raw_files):
        table = EUCountryTable(raw_files / "EUCountries.csv").load()

        assert table["Euro_Start_Year"].tolist() == [1999, 2009, 0]
        assert table["Euro_Start_Year"].dtype.kind == "i"

    @pytest.mark.parametrize("rate", [None, 0.0, -1.5])
    def test_euro_member_without_conversion_rate(self, tmp_path, eu_countries, rate):
        """A Euro member needs a positive irrevocable rate."""
        eu_countries.loc[eu_countries["Country"] == "Slovakia", "ExchRLCUtoEuro"] = rate
        path = tmp_path / "EUCountries.csv"
        eu_countries.to_csv(path, index=False)

        with pytest.raises(SchemaError, match="Slovakia"):
            EUCountryTable(path).load()

    def test_non_euro_member_needs_no_rate(self, raw_files):
        table = EUCountryTable(raw_files / "EUCountries.csv").load()

        assert table.loc[table["Country"] == "Sweden", "ExchRLCUtoEuro"].isna().all()

    def test_missing_euro_start_year(self, tmp_path, eu_countries):
        eu_countries.loc[0, "Euro_Start_Year"] = None
        path = tmp_path / "EUCountries.csv"
        eu_countries.to_csv(path, index=False)

        with pytest.raises(SchemaError, match="Euro_Start_Year"):
            EUCountryTable(path).load()


class TestDataSourceManager:
    """Test the manager built from configuration."""

    def test_from_config(self, config):
        manager = DataSourceManager.from_config(config)

        assert isinstance(manager.get_source(DataSourceType.FAOSTAT), FAOSTATPaperSource)
        assert all(manager.test_all_connections().values())

    def test_context_manager_loads_and_clears(self, config):
        manager = DataSourceManager.from_config(config)

        with manager as sources:
            assert sources.get_status()["loaded_sources"] == 3
            assert len(sources.countries.load()) == 3

        assert manager.get_status()["loaded_sources"] == 0

    def test_missing_file_stops_loading(self, config, raw_files):
        (raw_files / "EUCountries.csv").unlink()
        manager = DataSourceManager.from_config(config)

        with pytest.raises(DatasetNotFoundError):
            manager.load_all()
