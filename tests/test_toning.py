import numpy as np
import pytest
from conftest import solid
from inksplit.features.color.logic import build_color_stops
from inksplit.features.toning.logic import (
    apply_colormap,
    apply_gradient_map,
    compose_plates,
    gradient_pixel,
)
from inksplit.features.toning.processor import GradientProcessor
from inksplit.kernel.errors import InvalidInputError, NoChannelsProducedError
from inksplit.kernel.interfaces import PipelineContext


def stops(*colors):
    return build_color_stops(list(colors))


def test_no_stops_returns_pixel_unchanged():
    pixel = (12, 34, 56, 78)
    assert gradient_pixel(pixel, stops()) == pixel


def test_no_stops_returns_a_copy(random_rgba):
    res = apply_gradient_map(random_rgba, stops())
    assert np.array_equal(res, random_rgba)
    res[...] = 0
    assert random_rgba.any()


def test_transparent_pixels_pass_through():
    pixel = (10, 20, 30, 0)
    assert gradient_pixel(pixel, stops("#000000", "#ffffff")) == pixel


def test_monotone_runs_from_color_to_white():
    red = stops("#ff0000")
    assert gradient_pixel((0, 0, 0, 255), red) == (255, 0, 0, 255)
    assert gradient_pixel((255, 255, 255, 255), red) == (255, 255, 255, 255)


def test_duotone_endpoints():
    duo = stops("#112233", "#ddeeff")
    assert gradient_pixel((0, 0, 0, 255), duo) == (0x11, 0x22, 0x33, 255)
    assert gradient_pixel((255, 255, 255, 255), duo) == (0xDD, 0xEE, 0xFF, 255)


def test_duotone_midpoint_is_gamma_blended():
    assert gradient_pixel((128, 128, 128, 255), stops("#000000", "#ffffff")) == (
        186,
        186,
        186,
        255,
    )


def test_alpha_is_interpolated_linearly():
    res = gradient_pixel((128, 128, 128, 255), stops("#00000000", "#ffffffff"))
    assert res[3] == 128


def test_multitone_picks_the_segment():
    tri = stops("#000000", "#ff0000", "#ffffff")
    r, g, b, _ = gradient_pixel((64, 64, 64, 255), tri)
    assert 0 < r < 255
    assert g == 0 and b == 0

    r, g, b, _ = gradient_pixel((200, 200, 200, 255), tri)
    assert r == 255
    assert 0 < g < 255
    assert g == b


def test_gradient_on_plate_returns_rgba(random_plate):
    res = apply_gradient_map(random_plate, stops("#0000ff", "#ffff00"))
    assert res.shape == random_plate.shape + (4,)
    assert np.all(res[..., 3] == 255)


def test_gradient_is_deterministic(random_rgba):
    duo = stops("navy", "#ffcc00")
    assert np.array_equal(
        apply_gradient_map(random_rgba, duo), apply_gradient_map(random_rgba, duo)
    )


def test_malformed_color_falls_back_to_white():
    res = gradient_pixel((0, 0, 0, 255), stops("not-a-color"))
    assert res == (255, 255, 255, 255)


def test_gradient_pixel_rejects_bad_length():
    with pytest.raises(InvalidInputError):
        gradient_pixel((1, 2, 3), stops("#000000"))


def test_colormap_tints_dark_areas():
    img = np.array([[[0, 0, 0, 255], [255, 255, 255, 90]]], dtype=np.uint8)
    res = apply_colormap(img, "#ff0000")
    assert tuple(res[0, 0]) == (255, 0, 0, 255)
    assert tuple(res[0, 1]) == (255, 255, 255, 90)


def test_compose_multiplies_layers():
    red = solid((255, 0, 0, 255))
    cyan = solid((0, 255, 255, 255))
    white = solid((255, 255, 255, 255))
    assert np.all(compose_plates([red, white]) == np.array([255, 0, 0]))
    assert np.all(compose_plates([red, cyan]) == 0)


def test_compose_treats_transparent_as_paper():
    red = solid((255, 0, 0, 255))
    clear = solid((0, 0, 0, 0))
    assert np.array_equal(compose_plates([red, clear]), compose_plates([red]))


def test_compose_accepts_plates():
    plate = np.full((3, 3), 128, dtype=np.uint8)
    res = compose_plates([plate])
    assert res.shape == (3, 3, 3)
    assert np.all(res == 128)


def test_compose_errors():
    with pytest.raises(NoChannelsProducedError):
        compose_plates([])
    with pytest.raises(InvalidInputError):
        compose_plates([solid((0, 0, 0, 255)), solid((0, 0, 0, 255), size=(2, 2))])


def test_gradient_processor():
    context = PipelineContext(original_size=(1, 1))
    proc = GradientProcessor(["#ff0000"])
    assert not proc.is_passthrough
    res = proc.process(np.zeros((1, 1), dtype=np.uint8), context)
    assert tuple(res[0, 0]) == (255, 0, 0, 255)
    assert context.metrics["gradient_stops"] == 1
    assert GradientProcessor(None).is_passthrough
    assert GradientProcessor([]).is_passthrough


def test_alpha_mask_keeps_plate_pixels_transparent():
    plate = np.array([[0, 255], [128, 255]], dtype=np.uint8)
    alpha = np.array([[255, 0], [255, 255]], dtype=np.uint8)
    res = apply_gradient_map(plate, stops("#ff0000", "#0000ff"), alpha)
    assert tuple(res[0, 1]) == (255, 255, 255, 0)
    assert tuple(res[0, 0]) == (255, 0, 0, 255)
    assert tuple(res[1, 1]) == (0, 0, 255, 255)


def test_alpha_mask_does_not_touch_the_input():
    img = solid((10, 20, 30, 255), size=(2, 2))
    apply_gradient_map(img, stops(), np.zeros((2, 2), np.uint8))
    assert np.all(img[..., 3] == 255)


def test_alpha_mask_must_match():
    with pytest.raises(InvalidInputError):
        apply_gradient_map(np.zeros((2, 2), np.uint8), stops("#000"), np.zeros((3, 3), np.uint8))
