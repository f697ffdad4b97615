"""
Tests for service/spatial_render.py
"""
from backend.app.schema.draw import DrawMode, DrawSession
from backend.app.schema.search import Box, LatLng, PointFilter, PolygonFilter
from backend.app.service.spatial_render import render_draft, render_spatial_filter

BOX = Box(south_west=LatLng(lat=1, lng=2), north_east=LatLng(lat=3, lng=4))
TRIANGLE = [LatLng(lat=0, lng=0), LatLng(lat=0, lng=1), LatLng(lat=1, lng=1)]


class TestRenderSpatialFilter:
    def test_nothing_for_null_type_or_data(self):
        assert render_spatial_filter(None, BOX) is None
        assert render_spatial_filter("box", None) is None
        assert render_spatial_filter("polygon", []) is None

    def test_box_is_solid_rectangle(self):
        overlay = render_spatial_filter("box", BOX)
        assert overlay.kind == "rectangle"
        assert overlay.bounds == BOX
        assert overlay.path_options.dash_array is None
        assert overlay.path_options.fill_opacity == 0.1

    def test_point_is_marker_with_default_icon(self):
        overlay = render_spatial_filter("point", PointFilter(location=LatLng(lat=5, lng=6)))
        assert overlay.kind == "marker"
        assert overlay.position == LatLng(lat=5, lng=6)
        assert overlay.icon.icon_size == [25, 41]
        assert overlay.icon.icon_anchor == [12, 41]
        assert overlay.popup == "Selected Point"

    def test_point_accepts_bare_latlng(self):
        overlay = render_spatial_filter("point", LatLng(lat=5, lng=6))
        assert overlay.position == LatLng(lat=5, lng=6)

    def test_polygon_outline(self):
        overlay = render_spatial_filter("polygon", PolygonFilter(vertices=TRIANGLE))
        assert overlay.kind == "polygon"
        assert overlay.positions == TRIANGLE

    def test_polygon_accepts_vertex_list(self):
        overlay = render_spatial_filter("polygon", TRIANGLE)
        assert overlay.positions == TRIANGLE

    def test_mismatched_data(self):
        assert render_spatial_filter("box", PointFilter(location=LatLng(lat=0, lng=0))) is None
        assert render_spatial_filter("circle", BOX) is None

    def test_pure(self):
        assert render_spatial_filter("box", BOX) == render_spatial_filter("box", BOX)


class TestRenderDraft:
    def test_idle_session(self):
        assert render_draft(DrawSession()) is None

    def test_box_drag_is_dashed(self):
        session = DrawSession(mode=DrawMode.BOX, anchor=BOX.south_west, draft_box=BOX)
        overlay = render_draft(session)
        assert overlay.kind == "rectangle"
        assert overlay.path_options.dash_array == "5, 5"

    def test_polygon_in_progress_is_polyline(self):
        session = DrawSession(mode=DrawMode.POLYGON, vertices=TRIANGLE[:2])
        overlay = render_draft(session)
        assert overlay.kind == "polyline"
        assert overlay.positions == TRIANGLE[:2]
        assert overlay.path_options.dash_array == "5, 5"
