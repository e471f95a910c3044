from __future__ import annotations

from virt_cam.state import CameraType, VisibilityPreferences, WallVisibility
from virt_cam.visibility import (
    DEFAULT_BASE_CULLING_MASK,
    RenderLayer,
    VisibilityMasks,
    compute_culling_mask,
    describe_mask,
)


def test_default_preferences_render_everything_in_third_person():
    mask = compute_culling_mask(VisibilityPreferences(), CameraType.ATTACHED, base_mask=0)

    expected = (
        VisibilityMasks.WALLS
        | VisibilityMasks.WALL_TEXTURES
        | VisibilityMasks.FLOOR
        | VisibilityMasks.NOTES
        | VisibilityMasks.DEBRIS
        | VisibilityMasks.UI
        | VisibilityMasks.AVATAR
        | VisibilityMasks.THIRD_PERSON
    )
    assert mask == int(expected)
    assert not mask & VisibilityMasks.FIRST_PERSON


def test_unrelated_base_bits_are_preserved():
    base = (1 << 0) | (1 << 20) | VisibilityMasks.DEBRIS
    preferences = VisibilityPreferences(debris=False)

    mask = compute_culling_mask(preferences, CameraType.POSITIONABLE, base_mask=base)

    assert mask & (1 << 0)
    assert mask & (1 << 20)
    assert not mask & VisibilityMasks.DEBRIS


def test_default_base_mask_clears_every_disabled_category():
    preferences = VisibilityPreferences(
        walls=WallVisibility.HIDDEN,
        debris=False,
        ui=False,
        avatar=False,
        floor=False,
        notes=False,
    )

    mask = compute_culling_mask(preferences, CameraType.FIRST_PERSON, base_mask=DEFAULT_BASE_CULLING_MASK)

    assert describe_mask(mask) == ["FIRST_PERSON"]


def test_transparent_walls_only_render_wall_geometry():
    preferences = VisibilityPreferences(walls=WallVisibility.TRANSPARENT)

    mask = compute_culling_mask(preferences, CameraType.ATTACHED, base_mask=0)

    assert mask & VisibilityMasks.WALLS
    assert not mask & VisibilityMasks.WALL_TEXTURES


def test_auto_opaque_walls_need_a_wall_map():
    preferences = VisibilityPreferences(walls=WallVisibility.HIDDEN)

    without_map = compute_culling_mask(
        preferences, CameraType.ATTACHED, base_mask=0, auto_opaque_walls=True
    )
    with_map = compute_culling_mask(
        preferences,
        CameraType.ATTACHED,
        base_mask=0,
        auto_opaque_walls=True,
        probably_wall_map=True,
    )
    map_only = compute_culling_mask(
        preferences, CameraType.ATTACHED, base_mask=0, probably_wall_map=True
    )

    assert not without_map & VisibilityMasks.WALLS
    assert with_map & VisibilityMasks.WALLS
    assert with_map & VisibilityMasks.WALL_TEXTURES
    assert not map_only & VisibilityMasks.WALLS


def test_first_person_swaps_the_body_layers():
    mask = compute_culling_mask(VisibilityPreferences(), CameraType.FIRST_PERSON, base_mask=0)

    assert mask & VisibilityMasks.FIRST_PERSON
    assert not mask & VisibilityMasks.THIRD_PERSON


def test_mask_bits_follow_render_layers():
    assert int(VisibilityMasks.FLOOR) == 1 << RenderLayer.FLOOR
    assert int(VisibilityMasks.WALL_TEXTURES) == 1 << 27


def test_describe_mask_lists_names_in_layer_order():
    mask = int(VisibilityMasks.UI | VisibilityMasks.NOTES)

    assert describe_mask(mask) == ["UI", "NOTES"]


def test_first_person_with_walls_and_floor_only():
    base = 1 << 0
    preferences = VisibilityPreferences(debris=False, ui=False, avatar=False, notes=False)

    mask = compute_culling_mask(preferences, CameraType.FIRST_PERSON, base_mask=base)

    expected = base | int(
        VisibilityMasks.WALLS
        | VisibilityMasks.WALL_TEXTURES
        | VisibilityMasks.FLOOR
        | VisibilityMasks.FIRST_PERSON
    )
    assert mask == expected


def test_toggling_notes_flips_only_the_notes_bit():
    preferences = VisibilityPreferences()
    before = compute_culling_mask(preferences, CameraType.ATTACHED)

    preferences.notes = False
    after = compute_culling_mask(preferences, CameraType.ATTACHED)

    assert before ^ after == int(VisibilityMasks.NOTES)
