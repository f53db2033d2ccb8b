"""
Unit tests for deflator chaining.
"""

import numpy as np
import pandas as pd
import pytest

from eu_paper_demand.processors.deflator import (
    DeflatorChainer, DeflatorError, chain_deflator, chain_deflator_by_country,
    numeraire_deflator,
)
from eu_paper_demand.processors.base import ProcessingError


def _country(deflators, years, country="Austria"):
    return pd.DataFrame({
        "Country": country,
        "Year": years,
        "Deflator": deflators,
    })


class TestChainDeflator:
    """Test the base-year recurrence."""

    def test_recurrence_both_directions(self):
        d = [4.0, 3.0, 2.0, 5.0, 10.0]
        data = _country(d, [2008, 2009, 2010, 2011, 2012])

        result = chain_deflator(data, base_year=2010)

        expected = [
            1 / ((1 + d[1] / 100) * (1 + d[2] / 100)),
            1 / (1 + d[2] / 100),
            1.0,
            1 + d[3] / 100,
            (1 + d[3] / 100) * (1 + d[4] / 100),
        ]
        np.testing.assert_allclose(result["DeflBase"].to_numpy(), expected)

    def test_base_year_is_exactly_one(self):
        data = _country([7.3, 1.1, 0.4], [2009, 2010, 2011])

        result = chain_deflator(data, base_year=2010)

        assert result.loc[result["Year"] == 2010, "DeflBase"].iloc[0] == 1.0

    def test_earliest_deflator_is_not_used(self):
        low = chain_deflator(_country([0.0, 2.0, 3.0], [2008, 2009, 2010]), 2010)
        high = chain_deflator(_country([50.0, 2.0, 3.0], [2008, 2009, 2010]), 2010)

        np.testing.assert_allclose(low["DeflBase"], high["DeflBase"])

    def test_unsorted_input_is_sorted_by_year(self):
        data = _country([2.0, 10.0, 5.0], [2011, 2009, 2010])

        result = chain_deflator(data, base_year=2010)

        assert result["Year"].tolist() == [2009, 2010, 2011]
        np.testing.assert_allclose(result["DeflBase"], [1 / 1.05, 1.0, 1.02])

    def test_base_year_first_or_last(self):
        first = chain_deflator(_country([1.0, 2.0], [2010, 2011]), 2010)
        last = chain_deflator(_country([1.0, 2.0], [2009, 2010]), 2010)

        np.testing.assert_allclose(first["DeflBase"], [1.0, 1.02])
        np.testing.assert_allclose(last["DeflBase"], [1 / 1.02, 1.0])

    def test_missing_deflator_propagates(self):
        data = _country([1.0, np.nan, 2.0, 3.0, np.nan, 1.0], list(range(2007, 2013)))

        result = chain_deflator(data, base_year=2009)
        index = result.set_index("Year")["DeflBase"]

        assert np.isnan(index[2007])
        assert index[2008] == pytest.approx(1 / 1.02)
        assert index[2009] == 1.0
        assert index[2010] == pytest.approx(1.03)
        assert np.isnan(index[2011])
        assert np.isnan(index[2012])

    def test_missing_base_year_raises(self):
        with pytest.raises(DeflatorError, match="No 2010 deflator row for Austria"):
            chain_deflator(_country([1.0, 2.0], [2008, 2009]), 2010)


class TestByCountry:
    """Test per-country chaining and the numeraire."""

    def test_each_country_pinned_at_base(self, macro_table):
        result = chain_deflator_by_country(macro_table, base_year=2010)

        at_base = result.loc[result["Year"] == 2010, "DeflBase"]
        assert len(at_base) == macro_table["Country"].nunique()
        assert (at_base == 1.0).all()
        assert len(result) == len(macro_table)

    def test_countries_are_independent(self):
        data = pd.concat([
            _country([1.0, 2.0, 3.0], [2009, 2010, 2011], "Austria"),
            _country([10.0, 20.0, 30.0], [2009, 2010, 2011], "Belgium"),
        ])

        result = chain_deflator_by_country(data, 2010).set_index(["Country", "Year"])

        assert result.loc[("Austria", 2011), "DeflBase"] == pytest.approx(1.03)
        assert result.loc[("Belgium", 2011), "DeflBase"] == pytest.approx(1.30)
        assert result.loc[("Belgium", 2009), "DeflBase"] == pytest.approx(1 / 1.20)

    def test_numeraire_deflator(self, macro_table):
        us = numeraire_deflator(macro_table, base_year=2010)

        assert list(us.columns) == ["Year", "DeflUS"]
        np.testing.assert_allclose(
            us["DeflUS"], [1 / (1.01 * 1.01), 1 / 1.01, 1.0, 1.02]
        )

    def test_unknown_numeraire_raises(self, macro_table):
        with pytest.raises(DeflatorError, match="Numeraire country"):
            numeraire_deflator(macro_table, 2010, country="Atlantis")


class TestDeflatorChainer:
    """Test the deflator processor."""

    def test_process_with_validation(self, macro_table):
        chainer = DeflatorChainer(base_year=2010)

        result = chainer.process_with_validation(macro_table)

        assert result.is_success
        assert not result.has_validation_errors
        assert "DeflBase" in result.data.columns

    def test_base_year_parameter_overrides(self, macro_table):
        chainer = DeflatorChainer(base_year=2010)

        result = chainer.process_with_validation(macro_table, {"base_year": 2009})

        at_base = result.data.loc[result.data["Year"] == 2009, "DeflBase"]
        assert (at_base == 1.0).all()

    def test_missing_column_fails_input_validation(self, macro_table):
        chainer = DeflatorChainer()

        validation = chainer.validate_input(macro_table.drop(columns=["Deflator"]))

        assert not validation.is_valid
        assert "Missing column: Deflator" in validation.errors

    def test_duplicate_country_year_is_rejected(self, macro_table):
        chainer = DeflatorChainer()
        duplicated = pd.concat([macro_table, macro_table.iloc[[0]]], ignore_index=True)

        with pytest.raises(ProcessingError, match="Input validation failed"):
            chainer.process_with_validation(duplicated)
