import pytest

from mat_studio.config import PASTE_OFFSET_PX
from mat_studio.logic import state as ops
from mat_studio.logic.grid import grid_pitch_px
from mat_studio.logic.state import BackgroundSource, BackgroundTransform, MatSize, ProjectState, default_state
from mat_studio.logic.units import cm_to_pixels, mat_pixel_size


@pytest.fixture
def two_zones():
    s = ops.add_zone(default_state(), {"x": 0, "text": "A"}, zone_id="a")
    return ops.add_zone(s, {"x": 300, "text": "B"}, zone_id="b")


def test_defaults():
    s = default_state()
    assert s.mat_size == MatSize(width=60, height=35)
    assert s.unit == "cm" and s.export_dpi == 150
    assert s.grid_enabled and s.grid_size == 1
    assert s.project_name == "Mi Playmat"
    assert s.zones == () and s.background is None


class TestAddZone:
    def test_appends_with_defaults(self):
        s = ops.add_zone(default_state())
        zone = s.zones[-1]
        assert zone.id.startswith("zone-")
        assert (zone.x, zone.y) == (100, 100)
        assert zone.width == pytest.approx(cm_to_pixels(6.3))
        assert zone.height == pytest.approx(cm_to_pixels(8.8))

    def test_new_zones_go_on_top(self, two_zones):
        s = ops.add_zone(two_zones, zone_id="c")
        assert [z.id for z in s.zones] == ["a", "b", "c"]

    def test_partial_overrides_style(self):
        zone = ops.add_zone(default_state(), {"fill": "red", "strokeWidth": 1}).zones[0]
        assert zone.fill == "red" and zone.stroke_width == 1

    def test_ids_are_unique(self):
        s = default_state()
        for _ in range(20):
            s = ops.add_zone(s)
        assert len({z.id for z in s.zones}) == 20

    def test_does_not_mutate_input(self):
        s = default_state()
        ops.add_zone(s)
        assert s.zones == ()


class TestUpdateZone:
    def test_replaces_only_match_in_place(self, two_zones):
        s = ops.update_zone(two_zones, "a", {"fill": "blue"})
        assert [z.id for z in s.zones] == ["a", "b"]
        assert s.zones[0].fill == "blue"
        assert s.zones[1] == two_zones.zones[1]

    def test_unknown_id_adds_zone(self, two_zones):
        s = ops.update_zone(two_zones, "ghost", {"x": 5, "width": 50, "height": 60})
        ghost = ops.find_zone(s, "ghost")
        assert ghost is not None
        assert (ghost.x, ghost.width, ghost.height) == (5, 50, 60)

    def test_id_cannot_be_patched(self, two_zones):
        s = ops.update_zone(two_zones, "a", {"id": "b"})
        assert [z.id for z in s.zones] == ["a", "b"]


class TestBatchUpdate:
    def test_style_applies_to_all_but_position_does_not(self, two_zones):
        s = ops.batch_update_zones(two_zones, ["a", "b"], {"x": 10, "fill": "red"})
        a, b = s.zones
        assert a.fill == "red" and b.fill == "red"
        assert a.x == 0 and b.x == 300

    def test_only_targets_change(self, two_zones):
        s = ops.batch_update_zones(two_zones, ["b"], {"fill": "red"})
        assert s.zones[0] == two_zones.zones[0]

    def test_position_only_patch_is_a_noop(self, two_zones):
        assert ops.batch_update_zones(two_zones, ["a"], {"y": 1, "id": "x"}) is two_zones


def test_remove_zones(two_zones):
    s = ops.remove_zones(two_zones, ["a", "missing"])
    assert [z.id for z in s.zones] == ["b"]


class TestPaste:
    def test_offset_by_grid_pitch(self, two_zones):
        s = ops.paste_zone(two_zones, two_zones.zones[0])
        copy = s.zones[-1]
        assert copy.id not in ("a", "b")
        assert copy.x == pytest.approx(grid_pitch_px(1))
        assert copy.text == "A"

    def test_offset_without_grid(self, two_zones):
        s = ops.set_grid_enabled(two_zones, False)
        copy = ops.paste_zone(s, s.zones[0]).zones[-1]
        assert copy.x == PASTE_OFFSET_PX
        assert copy.y == 100 + PASTE_OFFSET_PX


class TestBackground:
    def test_set_background_clears_transform(self):
        s = ops.set_background_transform(default_state(), BackgroundTransform(image_width=10, image_height=10))
        s = ops.set_background(s, "url", "http://example.com/a.png")
        assert s.background is None
        assert s.background_source == BackgroundSource(kind="url", value="http://example.com/a.png")

    def test_clear(self):
        s = ops.set_background(default_state(), "upload", "data:image/png;base64,AA==")
        s = ops.clear_background(s)
        assert s.background is None and s.background_source is None

    def test_rotation_is_never_kept(self):
        bg = BackgroundTransform.model_validate({"imageWidth": 10, "imageHeight": 10, "rotation": 45})
        assert "rotation" not in bg.to_json_dict()

    def test_autofit_covers_and_centers(self):
        mat = MatSize(width=60, height=35)
        mat_w, mat_h = mat_pixel_size(mat)
        bg = ops.autofit_background(mat, 1000, 1000)
        scale = max(mat_w / 1000, mat_h / 1000)
        assert bg.scale_x == bg.scale_y == pytest.approx(scale)
        assert bg.x == pytest.approx((mat_w - 1000 * scale) / 2)
        assert bg.y == pytest.approx((mat_h - 1000 * scale) / 2)
        assert 1000 * scale >= mat_w - 1e-9 and 1000 * scale >= mat_h - 1e-9

    def test_quick_actions(self):
        mat = MatSize(width=60, height=35)
        mat_w, mat_h = mat_pixel_size(mat)
        bg = BackgroundTransform(image_width=200, image_height=100)

        stretched = ops.stretch_background(bg, mat)
        assert (stretched.scale_x * 200, stretched.scale_y * 100) == (pytest.approx(mat_w), pytest.approx(mat_h))
        assert (stretched.x, stretched.y) == (0, 0)

        wide = ops.fit_background_width(bg, mat)
        assert wide.scale_x * 200 == pytest.approx(mat_w) and wide.x == 0

        tall = ops.fit_background_height(bg, mat)
        assert tall.scale_y * 100 == pytest.approx(mat_h) and tall.y == 0

        centered = ops.center_background(bg.model_copy(update={"x": 5, "y": 7}), mat, True, False)
        assert centered.x == pytest.approx((mat_w - 200) / 2) and centered.y == 7


class TestSettings:
    def test_simple_setters(self):
        s = default_state()
        s = ops.set_mat_size(s, 40, 20)
        s = ops.set_grid_size(s, 0.5)
        s = ops.set_unit(s, "inch")
        s = ops.set_export_dpi(s, 600)
        s = ops.set_project_name(s, "Deck")
        s = ops.set_default_zone_size(s, 5, 5)
        assert s.mat_size == MatSize(width=40, height=20)
        assert (s.grid_size, s.unit, s.export_dpi, s.project_name) == (0.5, "inch", 600, "Deck")
        assert s.default_zone_size.width == 5

    def test_bad_unit(self):
        with pytest.raises(ValueError):
            ops.set_unit(default_state(), "furlong")

    def test_states_are_immutable(self):
        s = ProjectState()
        with pytest.raises(Exception):
            s.unit = "inch"


def test_reset_project_keeps_only_the_api_key(two_zones):
    s = ops.set_aux_api_key(ops.set_project_name(two_zones, "Old"), "k")
    fresh = ops.reset_project(s)
    assert fresh.zones == () and fresh.project_name == "Mi Playmat"
    assert fresh.aux_api_key == "k"
    assert ops.reset_project() == default_state()
