"""Tests for tidewatch.data.sources — file and HTTP loading via httpx MockTransport."""

import json

import httpx
import pytest

from tidewatch.data.sources import DataSource, parse_projection
from tidewatch.errors import GraphLoadError, ProjectionLoadError


def _transport(routes: dict[str, httpx.Response]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(request.url.path, httpx.Response(404))

    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# parse_projection
# ---------------------------------------------------------------------------


class TestParseProjection:
    def test_valid_entries(self):
        assert parse_projection({"a": [1, 2], "b": [0.5, -3.5, 9]}) == {
            "a": (1.0, 2.0),
            "b": (0.5, -3.5),
        }

    def test_malformed_entries_skipped(self):
        projection = parse_projection({
            "ok": [1, 2],
            "short": [1],
            "text": ["x", "y"],
            "bool": [True, 1],
            "none": None,
        })
        assert projection == {"ok": (1.0, 2.0)}

    def test_wrong_shape_rejected(self):
        with pytest.raises(ProjectionLoadError):
            parse_projection([[1, 2]])


# ---------------------------------------------------------------------------
# Local files
# ---------------------------------------------------------------------------


class TestFileSources:
    @pytest.mark.asyncio
    async def test_load_all_from_files(self, tmp_path, fleet_document):
        graph_path = tmp_path / "graph.json"
        graph_path.write_text(json.dumps(fleet_document))
        proj_path = tmp_path / "pca.json"
        proj_path.write_text(json.dumps({"8327": [0.1, 0.2]}))

        document, projection = await DataSource().load_all(str(graph_path), str(proj_path))
        assert len(document["nodes"]) == 11
        assert projection == {"8327": (0.1, 0.2)}

    @pytest.mark.asyncio
    async def test_missing_graph_is_fatal(self, tmp_path):
        with pytest.raises(GraphLoadError):
            await DataSource().load_graph(str(tmp_path / "missing.json"))

    @pytest.mark.asyncio
    async def test_invalid_graph_json_is_fatal(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(GraphLoadError):
            await DataSource().load_graph(str(path))

    @pytest.mark.asyncio
    async def test_missing_projection_degrades(self, tmp_path, caplog):
        projection = await DataSource().load_projection(str(tmp_path / "missing.json"))
        assert projection == {}
        assert "Failed to load projection data" in caplog.text

    @pytest.mark.asyncio
    async def test_no_projection_location(self):
        assert await DataSource().load_projection("") == {}
        assert await DataSource().load_projection(None) == {}


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


class TestHttpSources:
    @pytest.mark.asyncio
    async def test_load_all_over_http(self, fleet_document):
        transport = _transport({
            "/MC1_cleaned.json": httpx.Response(200, json=fleet_document),
            "/MC1_out_vessel_pca.json": httpx.Response(200, json={"Sea Breeze": [1, 1]}),
        })
        source = DataSource(transport=transport)
        document, projection = await source.load_all(
            "https://data.example.org/MC1_cleaned.json",
            "https://data.example.org/MC1_out_vessel_pca.json",
        )
        assert document["links"][0]["value"] == 2
        assert projection == {"Sea Breeze": (1.0, 1.0)}

    @pytest.mark.asyncio
    async def test_graph_http_error_is_fatal(self):
        source = DataSource(transport=_transport({}))
        with pytest.raises(GraphLoadError, match="Could not load graph data"):
            await source.load_graph("https://data.example.org/MC1_cleaned.json")

    @pytest.mark.asyncio
    async def test_projection_http_error_degrades(self):
        source = DataSource(transport=_transport({
            "/pca.json": httpx.Response(500),
        }))
        assert await source.load_projection("https://data.example.org/pca.json") == {}

    @pytest.mark.asyncio
    async def test_projection_wrong_shape_degrades(self):
        source = DataSource(transport=_transport({
            "/pca.json": httpx.Response(200, json=[1, 2, 3]),
        }))
        assert await source.load_projection("http://data.example.org/pca.json") == {}
