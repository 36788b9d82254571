"""
Tests for source acquisition and the primary / optional loading policy.
"""

import pytest
import requests

from offseason import data_handler
from offseason.data_handler import SourceUnavailableError, fetch_sources, load_source_text
from offseason.loader import PrimarySourceError, load_report_data
from offseason.schemas import SourceYear


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def sources(tmp_path, inventory_csv, graph_csv):
    """Writes a complete set of source files and returns their paths."""
    py = tmp_path / "py.csv"
    cy = tmp_path / "cy.csv"
    graph = tmp_path / "graph.csv"
    target = tmp_path / "target.csv"

    py.write_text(inventory_csv([{"Country": "HK", "SEASON": "23F", "Gross Sales ($)": "100"}]))
    cy.write_text(inventory_csv([{"Country": "HK", "SEASON": "24F", "Gross Sales ($)": "120"}]))
    graph.write_text(graph_csv([{"Period": "2512", "Season_Code": "24F", "Country": "HK"}]))
    target.write_text("PERIOD,SEASON,CATEGORY,AMOUNT\nDec-25,24F,INNER,500\n")

    return {"py": py, "cy": cy, "graph": graph, "target": target}


class TestLoadSourceText:
    def test_reads_local_file(self, tmp_path):
        path = tmp_path / "a.csv"
        path.write_bytes("\ufeffA,B\n1,2\n".encode("utf-8"))
        assert load_source_text(path) == "A,B\n1,2\n"

    def test_latin1_fallback(self, tmp_path):
        path = tmp_path / "a.csv"
        path.write_bytes(b"ITEM DESC2\ncaf\xe9\n")
        assert load_source_text(path) == "ITEM DESC2\ncafé\n"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailableError) as exc_info:
            load_source_text(tmp_path / "nope.csv")
        assert exc_info.value.reason == "file not found"

    def test_bare_name_resolves_under_input_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(data_handler.settings, "INPUT_DIR", tmp_path)
        (tmp_path / "extract.csv").write_text("A\n1\n")
        assert load_source_text("extract.csv") == "A\n1\n"

    def test_url(self, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse(b"A,B\n1,2\n")

        monkeypatch.setattr(data_handler.requests, "get", fake_get)

        assert load_source_text("https://example.com/cy.csv") == "A,B\n1,2\n"
        assert calls == [("https://example.com/cy.csv", data_handler.settings.REQUEST_TIMEOUT)]

    def test_url_failure(self, monkeypatch):
        monkeypatch.setattr(
            data_handler.requests, "get", lambda url, timeout: FakeResponse(b"", 404)
        )
        with pytest.raises(SourceUnavailableError):
            load_source_text("https://example.com/cy.csv")

    def test_connection_error(self, monkeypatch):
        def fake_get(url, timeout):
            raise requests.exceptions.ConnectionError("unreachable")

        monkeypatch.setattr(data_handler.requests, "get", fake_get)
        with pytest.raises(SourceUnavailableError) as exc_info:
            load_source_text("http://example.com/py.csv")
        assert "unreachable" in exc_info.value.reason


class TestFetchSources:
    def test_missing_sources_map_to_none(self, sources, tmp_path):
        texts = fetch_sources(
            {"PY": sources["py"], "CY": tmp_path / "missing.csv", "EXTRA": None}
        )
        assert texts["PY"] is not None
        assert texts["CY"] is None
        assert texts["EXTRA"] is None


class TestLoadReportData:
    """Test cases for load_report_data."""

    def test_all_sources(self, sources):
        data = load_report_data(
            sources["py"], sources["cy"], sources["graph"], sources["target"], 25
        )

        assert [r.source_year for r in data.inventory.records] == [SourceYear.PY, SourceYear.CY]
        assert len(data.graph) == 1
        assert len(data.target) == 1
        assert data.target.records[0].tag_sales == 500.0

    def test_missing_primary_source(self, sources, tmp_path):
        with pytest.raises(PrimarySourceError):
            load_report_data(
                sources["py"], tmp_path / "missing.csv", sources["graph"], sources["target"], 25
            )

    def test_empty_primary_source(self, sources, tmp_path):
        empty = tmp_path / "empty.csv"
        empty.write_text("period,Country,SEASON\n")

        with pytest.raises(PrimarySourceError) as exc_info:
            load_report_data(empty, sources["cy"], sources["graph"], sources["target"], 25)
        assert "PY" in exc_info.value.reason

    def test_missing_optional_sources_are_empty(self, sources, tmp_path):
        data = load_report_data(
            sources["py"],
            sources["cy"],
            tmp_path / "no_graph.csv",
            tmp_path / "no_target.csv",
            25,
        )

        assert len(data.inventory) == 2
        assert data.graph.records == []
        assert data.target.records == []

    def test_primary_sources_over_http(self, sources, monkeypatch):
        contents = {
            "https://example.com/py.csv": sources["py"].read_bytes(),
            "https://example.com/cy.csv": sources["cy"].read_bytes(),
        }
        monkeypatch.setattr(
            data_handler.requests, "get", lambda url, timeout: FakeResponse(contents[url])
        )

        data = load_report_data(
            "https://example.com/py.csv",
            "https://example.com/cy.csv",
            sources["graph"],
            sources["target"],
            25,
        )

        assert len(data.inventory) == 2
