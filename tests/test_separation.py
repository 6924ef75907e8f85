import numpy as np
import pytest
from conftest import solid
from inksplit.domain.models import ChannelKind, RgbChannel, CMYK_ORDER
from inksplit.features.separation.logic import separate_cmyk
from inksplit.features.separation.processor import ChannelSeparator
from inksplit.kernel.errors import (
    BufferGeometryError,
    EmptyImageError,
    UnsupportedChannelSelectionError,
)
from inksplit.kernel.validation import ensure_image, image_from_buffer


def _plates(color, channels=ChannelKind.ALL):
    return ChannelSeparator().separate(solid(color), channels)


@pytest.mark.parametrize("value", range(16))
def test_separate_returns_selected_plates_in_order(random_rgba, value):
    selection = ChannelKind(value)
    plates = ChannelSeparator().separate(random_rgba, selection)

    assert len(plates) == bin(value).count("1")
    assert [p.kind for p in plates] == [k for k in CMYK_ORDER if k in selection]
    for plate in plates:
        assert plate.image.shape == random_rgba.shape[:2]
        assert plate.image.dtype == np.uint8


def test_empty_selection_is_not_an_error(random_rgba):
    assert ChannelSeparator().separate(random_rgba, ChannelKind.NONE) == []


def test_solid_red_puts_ink_on_magenta_and_yellow():
    cyan, magenta, yellow, black = _plates((255, 0, 0, 255))
    assert np.all(cyan.image == 255)
    assert np.all(magenta.image == 0)
    assert np.all(yellow.image == 0)
    assert np.all(black.image == 255)


def test_pure_black_is_key_only():
    cyan, magenta, yellow, black = _plates((0, 0, 0, 255))
    for plate in (cyan, magenta, yellow):
        assert np.all(plate.image == 255)
    assert np.all(black.image == 0)


def test_white_carries_no_ink():
    for plate in _plates((255, 255, 255, 255)):
        assert np.all(plate.image == 255)


def test_gray_goes_to_key_plate():
    cyan, magenta, yellow, black = _plates((100, 100, 100, 255))
    for plate in (cyan, magenta, yellow):
        assert np.all(plate.image == 255)
    assert np.all(black.image == 100)


@pytest.mark.parametrize("color", [(0, 0, 0, 0), (255, 0, 0, 0), (12, 200, 90, 0)])
def test_transparent_pixels_are_white_on_every_plate(color):
    img = solid((30, 60, 90, 255), size=(3, 3))
    img[1, 1] = color
    for plate in ChannelSeparator().separate(img):
        assert plate.image[1, 1] == 255


def test_rgb_input_is_promoted():
    rgb = np.zeros((2, 3, 3), dtype=np.uint8)
    rgb[..., 0] = 255
    stack = separate_cmyk(ensure_image(rgb))
    assert stack.shape == (4, 2, 3)
    assert np.all(stack[1] == 0)


def test_selected_plates_do_not_alias_the_stack(random_rgba):
    stack = separate_cmyk(ensure_image(random_rgba))
    before = stack.copy()
    plates = ChannelSeparator().select(stack, ChannelKind.ALL)
    for plate in plates:
        plate.image[...] = 7
    assert np.array_equal(stack, before)


def test_tinted_plates_use_ink_colors():
    cyan, magenta, _, _ = ChannelSeparator(tinted=True).separate(solid((255, 0, 0, 255)))
    assert cyan.image.shape == (4, 4, 3)
    assert tuple(cyan.image[0, 0]) == (255, 255, 255)
    assert tuple(magenta.image[0, 0]) == (255, 0, 255)


def test_split_rgb_channels():
    sep = ChannelSeparator()
    red, green, blue = sep.split_rgb_channels(solid((255, 10, 0, 255)))
    assert np.all(red == 255)
    assert np.all(green == 10)
    assert np.all(blue == 0)

    subset = sep.split_rgb_channels(solid((1, 2, 3, 255)), RgbChannel.RED | RgbChannel.BLUE)
    assert [int(p[0, 0]) for p in subset] == [1, 3]
    assert sep.split_rgb_channels(solid((1, 2, 3, 255)), RgbChannel.NONE) == []


def test_image_from_buffer_checks_geometry():
    data = bytes(range(24))
    img = image_from_buffer(data, width=2, height=3, depth=4)
    assert img.shape == (3, 2, 4)
    assert img[0, 0].tolist() == [0, 1, 2, 3]

    rgb = image_from_buffer(bytes(18), width=2, height=3, depth=3)
    assert rgb.shape == (3, 2, 4)
    assert np.all(rgb[..., 3] == 255)

    with pytest.raises(BufferGeometryError):
        image_from_buffer(data[:-1], width=2, height=3, depth=4)
    with pytest.raises(BufferGeometryError):
        image_from_buffer(data + b"\x00", width=2, height=3, depth=4)
    with pytest.raises(BufferGeometryError):
        image_from_buffer(data, width=2, height=3, depth=2)


def test_zero_dimension_image_is_rejected():
    with pytest.raises(EmptyImageError):
        ensure_image(np.zeros((0, 5, 4), dtype=np.uint8))
    with pytest.raises(EmptyImageError):
        image_from_buffer(b"", width=0, height=3, depth=4)


def test_channel_kind_parse():
    assert ChannelKind.parse("ck") == ChannelKind.CYAN | ChannelKind.BLACK
    assert ChannelKind.parse("CMYK") == ChannelKind.ALL
    assert ChannelKind.parse("cyan, black") == ChannelKind.CYAN | ChannelKind.BLACK
    assert ChannelKind.parse("black") == ChannelKind.BLACK
    assert ChannelKind.parse("") == ChannelKind.NONE
    with pytest.raises(UnsupportedChannelSelectionError):
        ChannelKind.parse("cx")


def test_channel_kind_names_and_indices():
    assert [k.channel_name for k in ChannelKind.ALL.members()] == [
        "cyan",
        "magenta",
        "yellow",
        "black",
    ]
    assert [k.index for k in CMYK_ORDER] == [0, 1, 2, 3]
