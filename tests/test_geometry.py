"""Tests for AOI geometry validation."""

import pytest

from plugin.geometry import Bounds, Classification, classify

ARTBOARD = Bounds(0, 0, 400, 300)


@pytest.mark.parametrize(
    "bounds",
    [
        Bounds(10, 10, 69, 100),
        Bounds(10, 10, 100, 31),
        Bounds(0, 0, 1, 1),
        # Too small wins even when also outside the artboard
        Bounds(-50, -50, 20, 20),
        Bounds(390, 290, 60, 10),
    ],
)
def test_too_small_regardless_of_position(bounds):
    assert classify(bounds, ARTBOARD) is Classification.REJECTED_TOO_SMALL


@pytest.mark.parametrize(
    "bounds",
    [
        Bounds(0, 0, 70, 32),
        Bounds(0, 0, 400, 300),
        Bounds(330, 268, 70, 32),
        Bounds(100.5, 50.25, 120, 80),
    ],
)
def test_inside_and_big_enough_is_accepted(bounds):
    assert classify(bounds, ARTBOARD) is Classification.ACCEPTED


@pytest.mark.parametrize(
    "bounds",
    [
        Bounds(-1, 10, 100, 50),
        Bounds(10, -1, 100, 50),
        Bounds(301, 10, 100, 50),
        Bounds(10, 251, 100, 50),
        Bounds(-10, -10, 500, 400),
    ],
)
def test_partially_outside_is_out_of_bounds(bounds):
    assert classify(bounds, ARTBOARD) is Classification.REJECTED_OUT_OF_BOUNDS


def test_artboard_origin_is_ignored():
    # Layer bounds are relative to the artboard, only its size matters
    artboard = Bounds(1000, 1000, 400, 300)
    assert classify(Bounds(10, 10, 100, 50), artboard) is Classification.ACCEPTED


def test_custom_minimum_size():
    bounds = Bounds(0, 0, 80, 40)
    assert classify(bounds, ARTBOARD, min_width=100, min_height=32) is Classification.REJECTED_TOO_SMALL
    assert classify(bounds, ARTBOARD, min_width=80, min_height=40) is Classification.ACCEPTED
