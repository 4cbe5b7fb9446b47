"""Tests for tidewatch.views.projection and tidewatch.views.viewport."""

import pytest

from tidewatch.graph.loader import GraphLoader
from tidewatch.graph.models import Entity, EntityType
from tidewatch.graph.sampler import NeighborhoodSampler
from tidewatch.views.projection import (
    EMPTY_VIEW_PLACEHOLDER,
    UNAVAILABLE_PLACEHOLDER,
    ProjectionView,
    padded_extent,
)
from tidewatch.views.state import SelectionController
from tidewatch.views.viewport import Viewport

from conftest import SEEDS


@pytest.fixture
def graph(fleet_document):
    graph, _ = GraphLoader().load(fleet_document)
    return graph


@pytest.fixture
def controller(graph):
    return SelectionController(NeighborhoodSampler(graph).sample(SEEDS))


@pytest.fixture
def view(fleet_projection, graph, controller):
    return ProjectionView(fleet_projection, graph, controller)


class TestScene:
    def test_only_rendered_entities_with_coordinates(self, view):
        # Isolated Co has coordinates but is not rendered
        assert set(view.scene.ids) == {
            "8327", "Sea Breeze", "Coral Drift", "Mar de la Vida OJSC", "Liam Conti",
        }

    def test_domain_padded_ten_percent(self, view):
        # x extent [-1, 2], y extent [-1, 2]
        assert view.scene.x_domain == pytest.approx((-1.3, 2.3))
        assert view.scene.y_domain == pytest.approx((-1.3, 2.3))

    def test_ranges_and_inverted_y(self, view):
        scene = view.scene
        assert scene.x_range == (40, 280)
        assert scene.y_range == (260, 20)
        low = scene.get("Coral Drift")       # (2, -1)
        high = scene.get("Sea Breeze")        # (-1, 2)
        assert low.cx > high.cx
        assert low.cy > high.cy
        for point in scene.points:
            assert 40 <= point.cx <= 280
            assert 20 <= point.cy <= 260

    def test_single_point_centered(self, graph, controller):
        view = ProjectionView({"8327": (3.0, 3.0)}, graph, controller)
        point = view.scene.points[0]
        assert point.cx == pytest.approx((40 + 280) / 2)
        assert point.cy == pytest.approx((260 + 20) / 2)

    def test_filter_rebuilds_scene(self, view, controller):
        controller.set_filter(EntityType.VESSEL, False)
        assert set(view.scene.ids) == {"Mar de la Vida OJSC", "Liam Conti"}
        controller.set_filter(EntityType.VESSEL, True)
        assert len(view.scene.points) == 5

    def test_empty_visible_set_placeholder(self, view, controller):
        for etype in EntityType:
            controller.set_filter(etype, False)
        assert view.scene.points == []
        assert view.scene.placeholder == EMPTY_VIEW_PLACEHOLDER

    def test_disabled_without_projection(self, graph, controller):
        view = ProjectionView({}, graph, controller)
        assert not view.enabled
        assert view.scene.placeholder == UNAVAILABLE_PLACEHOLDER
        assert view.recompute().points == []

    def test_padded_extent_zero_width(self):
        assert padded_extent([4.0, 4.0]) == (3.0, 5.0)


class TestHighlightMirroring:
    def test_restyle_on_select(self, view, controller, graph):
        controller.select(graph.get("8327"))
        styles = {p.id: p.style for p in view.scene.points}
        assert styles["8327"].radius == 5
        assert styles["8327"].stroke == "#000"
        assert styles["Mar de la Vida OJSC"].highlighted
        assert styles["Sea Breeze"].opacity == 0.3
        assert styles["Sea Breeze"].stroke is None

    def test_highlighted_points_last(self, view, controller, graph):
        controller.select(graph.get("8327"))
        flags = [p.style.highlighted for p in view.scene.points]
        assert flags == sorted(flags)
        assert flags[-1]

    def test_restyle_keeps_positions(self, view, controller, graph):
        before = {p.id: (p.cx, p.cy) for p in view.scene.points}
        controller.select(graph.get("8327"))
        after = {p.id: (p.cx, p.cy) for p in view.scene.points}
        assert before == after

    def test_clear_restores_full_opacity(self, view, controller, graph):
        controller.select(graph.get("8327"))
        controller.clear()
        assert all(p.style.opacity == 1.0 and not p.style.highlighted for p in view.scene.points)


class TestClick:
    def test_click_equals_primary_select(self, fleet_projection, graph):
        sub = NeighborhoodSampler(graph).sample(SEEDS)
        primary = SelectionController(sub)
        primary.select(graph.get("Sea Breeze"))

        linked = SelectionController(sub)
        view = ProjectionView(fleet_projection, graph, linked)
        assert view.click("Sea Breeze")
        assert linked.highlight.nodes == primary.highlight.nodes
        assert linked.highlight.relationships == primary.highlight.relationships

    def test_unknown_id_ignored(self, view, controller):
        assert not view.click("Ghost")
        assert controller.highlight.selected is None


class TestViewport:
    def test_initial_transform(self):
        vp = Viewport.initial(960, 600)
        assert (vp.tx, vp.ty, vp.k) == (480, 300, 0.5)
        assert vp.apply(0, 0) == (480, 300)

    def test_center_on_entity(self):
        vp = Viewport.initial(960, 600)
        entity = Entity("a", x=100.0, y=-40.0)
        vp.center_on(entity)
        assert vp.k == 1.5
        assert vp.apply(100.0, -40.0) == pytest.approx((480, 300))

    def test_zoom_clamped(self):
        vp = Viewport.initial(960, 600)
        vp.zoom(100)
        assert vp.k == 8
        vp.zoom(0)
        assert vp.k == 0.1

    def test_invert(self):
        vp = Viewport(width=100, height=100, tx=10, ty=20, k=2)
        assert vp.invert(*vp.apply(3, 4)) == pytest.approx((3, 4))
