"""Tests for tidewatch.explorer — the user-facing controls and render outputs."""

import httpx
import pytest

from tidewatch.errors import DragError, GraphLoadError
from tidewatch.explorer import Explorer
from tidewatch.graph.models import EntityType


@pytest.fixture
def explorer(fleet_document, fleet_projection, test_settings):
    return Explorer.from_document(fleet_document, fleet_projection, config=test_settings)


class TestConstruction:
    def test_working_subgraph_from_configured_seeds(self, explorer):
        assert len(explorer.subgraph) == 10
        assert explorer.subgraph.seeds == {
            "Mar de la Vida OJSC", "979893388", "Oceanfront Oasis Inc Carriers", "8327",
        }

    def test_explicit_seeds(self, fleet_document, test_settings):
        explorer = Explorer.from_document(fleet_document, seeds=["Haul 2035-06"], config=test_settings)
        assert explorer.subgraph.seeds == {"Haul 2035-06"}
        assert not explorer.projection.enabled

    def test_malformed_projection_entries_skipped(self, fleet_document, test_settings):
        explorer = Explorer.from_document(
            fleet_document,
            {"8327": "bad", "Sea Breeze": [1.0], "Coral Drift": [0.5, -0.5]},
            config=test_settings,
        )
        assert explorer.projection.enabled
        assert explorer.projection.scene.ids == ["Coral Drift"]

    def test_non_object_projection_disables_view(self, fleet_document, test_settings):
        explorer = Explorer.from_document(fleet_document, [[1.0, 2.0]], config=test_settings)
        assert not explorer.projection.enabled
        assert explorer.projection.scene.placeholder == "Projection data unavailable"

    def test_missing_nodes_fatal(self, test_settings):
        with pytest.raises(GraphLoadError):
            Explorer.from_document({"links": []}, config=test_settings)

    def test_summary(self, explorer):
        summary = explorer.summary()
        assert summary["graph"]["node_count"] == 11
        assert summary["working_subgraph"]["entities"] == 10
        assert summary["load"]["dropped_relationships"] == 1
        assert summary["projection"]["points"] == 5
        assert summary["missing_seeds"] == []

    @pytest.mark.asyncio
    async def test_load_over_http(self, fleet_document, test_settings):
        def handler(request):
            if request.url.path.endswith("graph.json"):
                return httpx.Response(200, json=fleet_document)
            return httpx.Response(503)

        explorer = await Explorer.load(
            config=test_settings,
            graph_source="https://data.example.org/graph.json",
            projection_source="https://data.example.org/pca.json",
            transport=httpx.MockTransport(handler),
        )
        assert len(explorer.graph) == 11
        assert not explorer.projection.enabled
        assert explorer.projection.scene.placeholder == "Projection data unavailable"


class TestControls:
    def test_select_and_info_panel(self, explorer):
        assert explorer.select("8327")
        info = explorer.info_panel()
        assert info.id == "8327"
        assert info.type_label == "Vessel"
        assert info.country == "Oceanus"
        assert info.connections == 2
        assert info.distribution.counts["organization"] == 1
        assert info.distribution.counts["location"] == 1
        assert 0 <= info.risk.score <= 10
        assert info.average_connections == pytest.approx(18 / 11)

    def test_select_unknown_keeps_state(self, explorer):
        explorer.select("8327")
        assert not explorer.select("Ghost")
        assert explorer.selected.id == "8327"

    def test_info_panel_empty_when_idle(self, explorer):
        assert explorer.info_panel() is None

    def test_search_recenters_viewport(self, explorer):
        explorer.layout.run_until_settled()
        result = explorer.search("breeze")
        assert result.found
        entity = explorer.subgraph.get("Sea Breeze")
        assert explorer.viewport.k == 1.5
        assert explorer.viewport.apply(entity.x, entity.y) == pytest.approx((480, 300))

    def test_search_miss_records_notice(self, explorer):
        result = explorer.search("kraken")
        assert result.status == "not_found"
        assert explorer.notices == ["No matching entity found"]

    def test_highlight_seed(self, explorer):
        explorer.select("Haul 2035-06")
        assert explorer.highlight_seed("979893388")
        assert explorer.controller.highlight.nodes == {"979893388", "Oceanfront Oasis Inc Carriers"}
        assert explorer.viewport.k == 1.5

    def test_click_projection_matches_primary_click(self, fleet_document, fleet_projection, test_settings):
        a = Explorer.from_document(fleet_document, fleet_projection, config=test_settings)
        b = Explorer.from_document(fleet_document, fleet_projection, config=test_settings)
        a.select("Coral Drift")
        assert b.click_projection("Coral Drift")
        assert a.controller.highlight.nodes == b.controller.highlight.nodes
        assert a.info_panel().to_dict() == b.info_panel().to_dict()

    def test_click_projection_unknown(self, explorer):
        assert not explorer.click_projection("Ghost")

    def test_set_filter_accepts_names(self, explorer):
        assert explorer.set_filter("vessel", False)
        assert not explorer.controller.filters.is_enabled(EntityType.VESSEL)

    def test_set_filter_unknown_name_ignored(self, explorer):
        before = explorer.controller.filters.as_dict()
        assert not explorer.set_filter("company", False)
        assert explorer.controller.filters.as_dict() == before

    def test_filter_hides_segments_but_not_positions(self, explorer):
        before = explorer.layout.frame()
        explorer.set_filter(EntityType.PERSON, False)
        after = explorer.layout.frame()
        assert after.positions == before.positions
        assert len(after.segments) < len(before.segments)
        for seg in after.segments:
            assert EntityType.PERSON not in (seg.relationship.source.type, seg.relationship.target.type)

    def test_filter_keeps_highlight(self, explorer):
        explorer.select("Oceanfront Oasis Inc Carriers")
        explorer.set_filter(EntityType.PERSON, False)
        assert "979893388" in explorer.controller.highlight.nodes
        styles = explorer.primary_styles()
        assert not styles.nodes["979893388"].visible

    def test_clear(self, explorer):
        explorer.select("8327")
        explorer.clear()
        assert explorer.selected is None
        assert all(s.opacity == 1.0 for s in explorer.primary_styles().nodes.values())

    def test_drag_phases(self, explorer):
        explorer.drag("8327", "start")
        explorer.drag("8327", "move", 10.0, 20.0)
        frame = explorer.advance()
        assert frame.positions["8327"] == (10.0, 20.0)
        explorer.drag("8327", "end")
        assert explorer.layout.dragging is None

    def test_drag_errors(self, explorer):
        with pytest.raises(DragError):
            explorer.drag("8327", "wiggle")
        explorer.drag("8327", "start")
        with pytest.raises(DragError):
            explorer.drag("8327", "move")
        with pytest.raises(DragError):
            explorer.drag("Sea Breeze", "start")

    def test_resize(self, explorer):
        explorer.resize(500, 500)
        assert explorer.layout.alpha == pytest.approx(0.3)
        assert (explorer.viewport.width, explorer.viewport.height) == (500, 500)

    def test_tooltip(self, explorer):
        tip = explorer.tooltip("Oceanfront Oasis Inc Carriers")
        assert tip.type_label == "Organization"
        assert tip.country == "Marebak"
        assert tip.connections == 3
        assert explorer.tooltip("Ghost") is None

    def test_resample_releases_active_drag(self, explorer):
        explorer.drag("8327", "start")
        explorer.drag(None, "move", 500.0, 500.0)
        explorer.resample(["8327"])
        entity = explorer.graph.get("8327")
        assert (entity.fx, entity.fy) == (None, None)
        assert explorer.layout.dragging is None
        explorer.drag(None, "end")
        explorer.drag("8327", "start")
        assert explorer.layout.dragging is entity

    def test_resample(self, explorer):
        explorer.select("8327")
        sub = explorer.resample(["Isolated Co"])
        assert sub.entity_ids == {"Isolated Co"}
        assert explorer.selected is None
        assert explorer.projection.scene.ids == ["Isolated Co"]
