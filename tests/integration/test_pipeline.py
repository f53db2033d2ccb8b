"""
End-to-end tests of the cleaning pipeline on small raw tables.
"""

import numpy as np
import pandas as pd
import pytest

from eu_paper_demand.config import CleaningConfig
from eu_paper_demand.exporters import load_bundle
from eu_paper_demand.processors import PaperDemandPipeline, ProcessingError


pytestmark = pytest.mark.integration


def _row(table, **keys):
    mask = np.ones(len(table), dtype=bool)
    for column, value in keys.items():
        mask &= (table[column].astype(str) == str(value)).to_numpy()
    rows = table[mask]
    assert len(rows) == 1
    return rows.iloc[0]


class TestPipelineFromFiles:
    """Run from the configured raw files."""

    def test_run_writes_bundle(self, config):
        pipeline = PaperDemandPipeline(config)

        result = pipeline.run()

        assert result.is_success
        bundle = load_bundle(config.output.bundle_path)
        assert set(bundle) == {"paper_products", "paper_trade", "macro"}
        assert set(result.data) == {"paper_products", "paper_trade", "macro", "eu_aggregate"}

    def test_export_tables(self, tmp_path, raw_files):
        config = CleaningConfig(
            input={"raw_directory": raw_files},
            output={
                "output_directory": tmp_path / "out",
                "export_tables": True,
                "output_formats": ["csv"],
            },
        )

        PaperDemandPipeline(config).run()

        for name in ("paper_products", "paper_trade", "macro", "eu_aggregate"):
            assert (tmp_path / "out" / f"{name}.csv").exists()

    def test_missing_raw_file(self, config, raw_files):
        (raw_files / "paper_and_paperboard.pkl").unlink()

        with pytest.raises(ProcessingError):
            PaperDemandPipeline(config).run(save=False)


class TestPipelineTables:
    """Check the cleaned tables built from in-memory raw data."""

    @pytest.fixture
    def tables(self, config, raw_data):
        return PaperDemandPipeline(config).run(raw_data, save=False).data

    def test_eu_selection(self, tables):
        for name in ("paper_products", "paper_trade", "macro"):
            assert set(tables[name]["Country"]) == {"Germany", "Slovakia", "Sweden"}

    def test_exchange_rates(self, tables):
        macro = tables["macro"]

        # Slovakia before adoption: national rate over the irrevocable rate
        slovakia_2008 = _row(macro, Country="Slovakia", Year=2008)
        assert slovakia_2008["ExchReur"] == pytest.approx(21.36 / 30.126)
        # Slovakia after adoption takes the Euro area rate
        assert _row(macro, Country="Slovakia", Year=2009)["ExchReur"] == pytest.approx(0.72)
        assert _row(macro, Country="Germany", Year=2008)["ExchReur"] == pytest.approx(0.68)
        assert _row(macro, Country="Sweden", Year=2010)["ExchReur"] == pytest.approx(7.21)
        assert not macro["ExchReur"].isna().any()

    def test_deflator_and_gdp(self, tables):
        macro = tables["macro"]

        assert (macro.loc[macro["Year"] == 2010, "DeflBase"] == 1.0).all()
        assert _row(macro, Country="Germany", Year=2011)["DeflBase"] == pytest.approx(1.01)
        assert _row(macro, Country="Germany", Year=2009)["DeflBase"] == pytest.approx(1 / 1.01)

        germany_2009 = _row(macro, Country="Germany", Year=2009)
        assert germany_2009["GDPconstantUSD"] == pytest.approx(2300.0 / ((1 / 1.01) * 0.755))
        assert macro[["Country", "Year"]].equals(
            macro[["Country", "Year"]].sort_values(["Country", "Year"]).reset_index(drop=True)
        )

    def test_paper_products(self, tables):
        paper = tables["paper_products"]

        assert len(paper) == 24
        assert list(paper.columns) == [
            "Year", "Country", "Item", "Price", "Consumption", "GDPconstantUSD",
            "Import_Price", "Export_Price",
        ]
        assert paper["Item"].iloc[0] == "Total Paper and Paperboard"

        germany = _row(paper, Country="Germany", Year=2010, Item="Newsprint")
        assert germany["Consumption"] == pytest.approx(90.0)
        assert germany["Price"] == pytest.approx((12.0 + 15.0) / (20.0 + 30.0) * 1000)
        assert germany["GDPconstantUSD"] == pytest.approx(2500.0 / 0.755)

        germany_2011 = _row(paper, Country="Germany", Year=2011, Item="Newsprint")
        assert germany_2011["Import_Price"] == pytest.approx(12.0 / 20.0 / 1.02 * 1000)

        sweden = _row(paper, Country="Sweden", Year=2010, Item="Newsprint")
        assert sweden["Consumption"] == pytest.approx(70.0)
        assert np.isnan(sweden["Import_Price"])

    def test_trade_table(self, tables):
        trade = tables["paper_trade"]

        assert len(trade) == 2 * len(tables["paper_products"])
        assert set(trade["Trade"]) == {"Import", "Export"}

    def test_eu_aggregate(self, tables):
        aggregate = tables["eu_aggregate"]

        # 2 items x 4 years x 4 elements
        assert len(aggregate) == 32
        consumption = _row(aggregate, Element="Consumption", Year=2010, Item="Newsprint")
        assert consumption["Quantity"] == pytest.approx(90.0 + 90.0 + 70.0)

    def test_missing_dataset_fails(self, config, raw_data):
        del raw_data["countries"]

        with pytest.raises(ProcessingError, match="countries"):
            PaperDemandPipeline(config).run(raw_data, save=False)


def test_base_year_is_configurable(tmp_path, raw_files, raw_data):
    config = CleaningConfig(
        input={"raw_directory": raw_files},
        output={"output_directory": tmp_path / "enddata"},
        processing={"base_year": 2009},
    )

    macro = PaperDemandPipeline(config).run(raw_data, save=False).data["macro"]

    assert (macro.loc[macro["Year"] == 2009, "DeflBase"] == 1.0).all()
    slovakia_2009 = _row(macro, Country="Slovakia", Year=2009)
    assert slovakia_2009["GDPconstantUSD"] == pytest.approx(62.0 / 0.72)
