import math

import pandas as pd
import pytest

from ewswing.data.bars import PriceSource
from ewswing.ew.core.degree import ElliottDegree
from ewswing.ew.core.model import SwingPivot, SwingType
from ewswing.ew.detectors.zigzag import ZigZagSwingDetector
from ewswing.swing.zigzag import ZigZagState, ZigZagTrend, zigzag_pivots, zigzag_states


def test_zigzag_basic():
    states = list(zigzag_states([10, 8, 6, 11, 13], 1.0))
    pts = zigzag_pivots(states)
    assert pts == [SwingPivot(2, 6.0, SwingType.LOW)]
    assert states[1].trend is ZigZagTrend.DOWN
    assert states[3].trend is ZigZagTrend.UP
    assert states[4].trend is ZigZagTrend.UP
    assert states[4].last_extreme_index == 4
    assert states[4].last_extreme_price == 13


def test_first_state_is_seeded():
    st = next(zigzag_states([10, 11], 1.0))
    assert st.trend is ZigZagTrend.UNDEFINED
    assert not st.has_high and not st.has_low
    assert st.last_extreme_index == 0


def test_reversal_at_exact_threshold():
    assert zigzag_pivots(zigzag_states([10, 12, 11], 1.0)) == [SwingPivot(1, 12.0, SwingType.HIGH)]
    assert zigzag_pivots(zigzag_states([10, 12, 11], 1.5)) == []


def test_flat_series_has_no_pivots():
    states = list(zigzag_states([5, 5, 5, 5], 1.0))
    assert all(s.trend is ZigZagTrend.UNDEFINED for s in states)
    assert zigzag_pivots(states) == []


def test_zero_threshold_reverses_on_any_counter_move():
    pts = zigzag_pivots(zigzag_states([1, 2, 1, 2], 0.0))
    assert [(p.index, p.kind) for p in pts] == [(1, SwingType.HIGH), (2, SwingType.LOW)]


def test_invalid_threshold_never_reverses():
    nan = float("nan")
    assert zigzag_pivots(zigzag_states([10, 12, 8, 14], [nan] * 4)) == []
    assert zigzag_pivots(zigzag_states([10, 12, 8, 14], [-1.0] * 4)) == []


def test_short_threshold_series_is_padded_with_nan():
    # only the first two bars have a threshold
    assert zigzag_pivots(zigzag_states([10, 12, 8, 14], [1.0, 1.0])) == []


def test_invalid_price_leaves_state_unchanged():
    states = list(zigzag_states([10, float("nan"), 12], 1.0))
    assert states[1] == states[0]
    assert states[2].trend is ZigZagTrend.UP


def test_pivots_alternate_and_increase():
    prices = [10, 12, 9, 15, 14, 18, 11, 13, 7, 9, 8, 12]
    pts = zigzag_pivots(zigzag_states(prices, 2.0))
    assert len(pts) >= 3
    for a, b in zip(pts, pts[1:]):
        assert a.index < b.index
        assert a.kind is not b.kind


def test_default_state_is_empty():
    st = ZigZagState()
    assert st.last_high_index == -1
    assert math.isnan(st.last_extreme_price)


def test_detector_worked_example():
    det = ZigZagSwingDetector(threshold=1.0)
    res = det.detect([10, 8, 6, 11, 13], 4, ElliottDegree.MINOR)
    assert res.pivots == (SwingPivot(2, 6.0, SwingType.LOW),)
    assert res.swings == ()


def test_detector_ignores_bars_after_index():
    det = ZigZagSwingDetector(threshold=1.0)
    assert det.detect([10, 8, 6, 11, 13], 2, ElliottDegree.MINOR).pivots == ()


def test_detector_builds_swings_between_pivots():
    det = ZigZagSwingDetector(threshold=2.0)
    res = det.detect([10, 14, 11, 16, 12, 13], 5, ElliottDegree.MINUTE)
    assert res.pivot_indexes == [1, 2, 3]
    assert len(res) == 2
    assert res.swings[0].from_index == 1 and res.swings[0].to_index == 2
    assert not res.swings[0].is_rising
    assert all(s.degree is ElliottDegree.MINUTE for s in res.swings)


def test_detector_accepts_dataframe_and_series():
    close = pd.Series([100, 102, 105, 100, 98, 103])
    det = ZigZagSwingDetector.percent(3.0)
    from_series = det.detect(close, 5, ElliottDegree.MINOR)
    from_frame = det.detect(pd.DataFrame({"close": close}), 5, ElliottDegree.MINOR)
    assert from_series == from_frame
    assert [p.kind for p in from_series.pivots] == [SwingType.HIGH, SwingType.LOW]


def test_percent_threshold():
    det = ZigZagSwingDetector.percent(10.0)
    res = det.detect([100, 111, 99], 2, ElliottDegree.MINOR)
    assert res.pivots == (SwingPivot(1, 111.0, SwingType.HIGH),)


def test_states_cover_requested_bars():
    det = ZigZagSwingDetector(threshold=1.0)
    assert len(det.states([10, 8, 6, 11, 13], 3)) == 4
    assert len(det.states([10, 8, 6, 11, 13])) == 5
    assert det.states([]) == []


def test_empty_series_yields_empty_result():
    res = ZigZagSwingDetector().detect([], 0, ElliottDegree.MINOR)
    assert res.pivots == () and res.swings == ()


def test_detector_validation():
    with pytest.raises(ValueError):
        ZigZagSwingDetector(threshold=-1.0)
    with pytest.raises(ValueError):
        ZigZagSwingDetector(threshold="wide")
    with pytest.raises(ValueError):
        ZigZagSwingDetector().detect([1, 2, 3], 2, None)
    with pytest.raises(ValueError):
        ZigZagSwingDetector.atr(period=0)


def test_extreme_only_extends_within_a_trend():
    prices = [100 + 7 * math.sin(i / 3.0) + (i % 5) - 2 for i in range(80)]
    states = list(zigzag_states(prices, 3.0))
    flips = 0
    for prev, cur in zip(states, states[1:]):
        if cur.trend is not prev.trend:
            flips += 1
            continue
        if cur.trend is ZigZagTrend.UP:
            assert cur.last_extreme_price >= prev.last_extreme_price
        elif cur.trend is ZigZagTrend.DOWN:
            assert cur.last_extreme_price <= prev.last_extreme_price
    assert flips >= 4


def test_detect_is_repeatable():
    prices = [10, 12, 9, 15, 14, 18, 11, 13, 7, 9, 8, 12]
    for det in (ZigZagSwingDetector(threshold=2.0), ZigZagSwingDetector.atr(3, 1.0)):
        first = det.detect(prices, len(prices) - 1, ElliottDegree.MINOR)
        assert det.detect(prices, len(prices) - 1, ElliottDegree.MINOR) == first


def test_price_source_is_checked_when_built():
    assert ZigZagSwingDetector(price="high", threshold=1.0).price is PriceSource.HIGH
    res = ZigZagSwingDetector(price="high", threshold=1.0).detect([10, 8, 6, 11, 13], 4, ElliottDegree.MINOR)
    assert res.pivots == (SwingPivot(2, 6.0, SwingType.LOW),)
    with pytest.raises(ValueError):
        ZigZagSwingDetector(price=None)
    with pytest.raises(ValueError):
        ZigZagSwingDetector(price="typical")


def test_capitalised_ohlc_columns_are_recognised():
    frame = pd.DataFrame(
        {
            "Open": [50.0] * 5,
            "High": [10.5, 8.5, 6.5, 11.5, 13.5],
            "Low": [9.5, 7.5, 5.5, 10.5, 12.5],
            "Close": [10.0, 8.0, 6.0, 11.0, 13.0],
        }
    )
    res = ZigZagSwingDetector(threshold=1.0).detect(frame, 4, ElliottDegree.MINOR)
    assert res.pivots == (SwingPivot(2, 6.0, SwingType.LOW),)
