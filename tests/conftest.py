"""
Shared fixtures: a small EU with one Euro founder, one late Euro adopter and
one country that never adopted the Euro, over 2008-2011.
"""

import numpy as np
import pandas as pd
import pytest

from eu_paper_demand.config import CleaningConfig


YEARS = [2008, 2009, 2010, 2011]


@pytest.fixture
def eu_countries():
    """EU reference table."""
    return pd.DataFrame({
        "Country": ["Germany", "Slovakia", "Sweden"],
        "FAOST_CODE": [79, 199, 210],
        "ISO2_WB_CODE": ["DE", "SK", "SE"],
        "ExchRLCUtoEuro": [1.95583, 30.126, np.nan],
        "Euro_Start_Year": [1999, 2009, 0],
    })


@pytest.fixture
def macro_table():
    """World Bank table including the Euro area and United States rows."""
    rows = []

    def add(country, code, gdp, deflator, exch):
        for year, g, d, e in zip(YEARS, gdp, deflator, exch):
            rows.append({
                "Country": country, "ISO2_WB_CODE": code, "Year": year,
                "GDPcurrentLCU": g, "Deflator": d, "ExchR": e, "Population": 1e6,
            })

    add("Germany", "DE", [2400.0, 2300.0, 2500.0, 2600.0],
        [1.0, 2.0, 1.0, 1.0], [np.nan] * 4)
    add("Slovak Republic", "SK", [60.0, 62.0, 65.0, 70.0],
        [3.0, 1.0, 0.5, 2.0], [21.36, np.nan, np.nan, np.nan])
    add("Sweden", "SE", [3200.0, 3100.0, 3300.0, 3500.0],
        [2.0, 2.0, 1.0, 1.0], [6.59, 7.65, 7.21, 6.49])
    add("Euro area", "XC", [np.nan] * 4,
        [2.0, 1.0, 1.0, 1.0], [0.68, 0.72, 0.755, 0.719])
    add("United States", "US", [14000.0, 14100.0, 14500.0, 15000.0],
        [2.0, 1.0, 1.0, 2.0], [1.0] * 4)

    return pd.DataFrame(rows)


@pytest.fixture
def paper_table():
    """FAOSTAT paper table with two items and a few missing trade values."""
    rows = []
    countries = [("Germany", 79), ("Slovakia", 199), ("Sweden", 210), ("Norway", 162)]

    for country, code in countries:
        for year in YEARS:
            for item, scale in (("Newsprint", 1.0), ("Paper and Paperboard", 10.0)):
                rows.append({
                    "Country": country, "FAOST_CODE": code, "Year": year, "Item": item,
                    "Production": 100.0 * scale,
                    "Import_Quantity": 20.0 * scale,
                    "Export_Quantity": 30.0 * scale,
                    "Import_Value": 12.0 * scale,
                    "Export_Value": 15.0 * scale,
                })

    paper = pd.DataFrame(rows)
    sweden_newsprint = (paper["Country"] == "Sweden") & (paper["Item"] == "Newsprint")
    paper.loc[sweden_newsprint, ["Import_Quantity", "Import_Value"]] = np.nan
    return paper


@pytest.fixture
def raw_data(paper_table, macro_table, eu_countries):
    return {"paper": paper_table, "macro": macro_table, "countries": eu_countries}


@pytest.fixture
def raw_files(tmp_path, paper_table, macro_table, eu_countries):
    """Raw tables written where the default input configuration looks."""
    raw_directory = tmp_path / "rawdata"
    raw_directory.mkdir()
    paper_table.to_pickle(raw_directory / "paper_and_paperboard.pkl")
    macro_table.to_pickle(raw_directory / "gdp_deflator_exchange_rate_population.pkl")
    eu_countries.to_csv(raw_directory / "EUCountries.csv", index=False)
    return raw_directory


@pytest.fixture
def config(tmp_path, raw_files):
    """Configuration reading the raw files and writing under tmp_path."""
    return CleaningConfig(
        input={"raw_directory": raw_files},
        output={"output_directory": tmp_path / "enddata"},
    )
