import pytest

from ewswing.ew.core.degree import ElliottDegree
from ewswing.ew.core.model import ElliottSwing
from ewswing.swing.filters import ChainedSwingFilter, MinMagnitudeSwingFilter, SwingFilter, chain_filters


def _swings():
    d = ElliottDegree.MINOR
    return [
        ElliottSwing(0, 1, 100, 110, d),
        ElliottSwing(1, 2, 110, 107, d),
        ElliottSwing(2, 3, 107, 113, d),
    ]


def test_keeps_swings_above_half_of_largest():
    swings = _swings()
    kept = MinMagnitudeSwingFilter(0.5).filter(swings)
    assert kept == [swings[0], swings[2]]


def test_output_is_a_subset_in_order():
    swings = _swings()
    kept = MinMagnitudeSwingFilter(0.25).filter(swings)
    assert kept == swings
    assert kept is not swings


def test_threshold_one_keeps_only_the_largest():
    swings = _swings()
    assert MinMagnitudeSwingFilter(1.0).filter(swings) == [swings[0]]


def test_empty_input():
    assert MinMagnitudeSwingFilter().filter([]) == []
    assert MinMagnitudeSwingFilter().filter(None) == []


def test_invalid_amplitudes_are_dropped():
    d = ElliottDegree.MINOR
    swings = [ElliottSwing(0, 1, float("nan"), 5, d), ElliottSwing(1, 2, 5, 9, d)]
    assert MinMagnitudeSwingFilter(0.5).filter(swings) == [swings[1]]


@pytest.mark.parametrize("threshold", [0.0, -0.1, 1.01, float("nan")])
def test_threshold_validation(threshold):
    with pytest.raises(ValueError):
        MinMagnitudeSwingFilter(threshold)


def test_chain_applies_left_to_right():
    swings = _swings()
    chained = chain_filters(MinMagnitudeSwingFilter(0.5), MinMagnitudeSwingFilter(1.0))
    assert isinstance(chained, ChainedSwingFilter)
    assert isinstance(chained, SwingFilter)
    assert chained.filter(swings) == [swings[0]]
