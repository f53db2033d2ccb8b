"""
Unit tests for table export.
"""

import pandas as pd

from eu_paper_demand.exporters import TableExporter, load_bundle


def _tables():
    return {
        "paper_products": pd.DataFrame({"Year": [2010], "Price": [500.0]}),
        "macro": pd.DataFrame({"Country": ["Sweden"], "ExchReur": [7.21]}),
    }


def test_bundle_holds_every_table(tmp_path):
    exporter = TableExporter(tmp_path / "enddata")

    path = exporter.export_bundle(_tables(), "bundle.pkl")

    assert path == tmp_path / "enddata" / "bundle.pkl"
    bundle = load_bundle(path)
    assert set(bundle) == {"paper_products", "macro"}
    pd.testing.assert_frame_equal(bundle["macro"], _tables()["macro"])


def test_export_tables(tmp_path):
    exporter = TableExporter(tmp_path)

    created = exporter.export_tables(_tables(), ["csv", "parquet"])

    assert len(created) == 4
    assert (tmp_path / "macro.csv").exists()
    assert pd.read_parquet(tmp_path / "paper_products.parquet")["Price"].tolist() == [500.0]
