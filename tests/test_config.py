import json

import pytest

from ewswing.config import (
    ConfigManager,
    DictProvider,
    EnvProvider,
    FileProvider,
    build_detector,
    build_filter,
    build_model,
    build_profile,
    get_path,
    load_config,
)
from ewswing.ew.core.confidence import ConfidenceModel
from ewswing.ew.core.phase import ScenarioType
from ewswing.ew.detectors.adaptive import AdaptiveZigZagSwingDetector
from ewswing.ew.detectors.composite import CompositePolicy, CompositeSwingDetector
from ewswing.ew.detectors.fractal import FractalSwingDetector
from ewswing.ew.detectors.zigzag import AtrThreshold, PercentThreshold, ZigZagSwingDetector
from ewswing.swing.filters import ChainedSwingFilter, MinMagnitudeSwingFilter


def test_layering_defaults_file_env(tmp_path, monkeypatch):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"detector": {"kind": "zigzag", "threshold": 2.0}, "log": {"level": "info"}}))
    monkeypatch.setenv("EWSWING_DETECTOR__THRESHOLD", "3.5")
    monkeypatch.setenv("EWSWING_LOG__JSON", "true")

    cfg = load_config({"detector": {"kind": "fractal", "window": 2}, "other": 1}, str(path))
    assert cfg["detector"] == {"kind": "zigzag", "window": 2, "threshold": 3.5}
    assert cfg["log"] == {"level": "info", "json": True}
    assert cfg["other"] == 1
    assert get_path(cfg, "detector.threshold") == 3.5
    assert get_path(cfg, "detector.missing", "x") == "x"


def test_env_can_be_disabled(monkeypatch):
    monkeypatch.setenv("EWSWING_OTHER", "2")
    assert load_config({"other": 1}, use_env=False) == {"other": 1}
    assert load_config({"other": 1})["other"] == 2
    assert load_config({"other": 1}, overrides={"other": 3})["other"] == 3


def test_toml_file(tmp_path):
    path = tmp_path / "cfg.toml"
    path.write_text('[filter]\nkind = "magnitude"\nrelative_threshold = 0.4\n')
    assert FileProvider(path=str(path)).load() == {"filter": {"kind": "magnitude", "relative_threshold": 0.4}}


def test_missing_and_unsupported_files(tmp_path):
    assert FileProvider(path=str(tmp_path / "nope.json"), optional=True).load() == {}
    with pytest.raises(FileNotFoundError):
        load_config({}, str(tmp_path / "nope.json"))
    bad = tmp_path / "cfg.yaml"
    bad.write_text("a: 1")
    with pytest.raises(RuntimeError):
        FileProvider(path=str(bad)).load()


def test_env_values_are_coerced(monkeypatch):
    monkeypatch.setenv("EWSWING_A", "1")
    monkeypatch.setenv("EWSWING_B", "0.25")
    monkeypatch.setenv("EWSWING_C", "off")
    monkeypatch.setenv("EWSWING_D", "[1, 2]")
    monkeypatch.setenv("EWSWING_E", "close")
    out = EnvProvider().load()
    assert out["a"] == 1
    assert out["b"] == 0.25
    assert out["c"] is False
    assert out["d"] == [1, 2]
    assert out["e"] == "close"


def test_manager_does_not_mutate_defaults():
    defaults = {"a": {"b": 1}}
    merged = ConfigManager([DictProvider(data=defaults), DictProvider(data={"a": {"c": 2}})]).load()
    assert merged == {"a": {"b": 1, "c": 2}}
    assert defaults == {"a": {"b": 1}}


def test_build_detectors():
    frac = build_detector({"kind": "fractal", "window": 3})
    assert frac == FractalSwingDetector(3, 3, 0)

    assert build_detector({"kind": "zigzag", "threshold": 2}).threshold == 2.0
    atr = build_detector({"kind": "zigzag", "atr_period": 10, "atr_multiplier": 1.5})
    assert atr.threshold == AtrThreshold(10, 1.5)
    pct = build_detector({"kind": "ZigZag", "pct": 3.0})
    assert isinstance(pct, ZigZagSwingDetector) and pct.threshold == PercentThreshold(3.0)

    adaptive = build_detector({"kind": "adaptive_zigzag", "period": 5, "multiplier": 1.5, "min_threshold": 0.5})
    assert isinstance(adaptive, AdaptiveZigZagSwingDetector)
    assert adaptive.config.period == 5
    assert adaptive.config.min_threshold == 0.5

    comp = build_detector(
        {
            "kind": "composite",
            "policy": "OR",
            "detectors": [{"kind": "fractal"}, {"kind": "zigzag", "threshold": 1.0}],
        }
    )
    assert isinstance(comp, CompositeSwingDetector)
    assert comp.policy is CompositePolicy.OR
    assert len(comp.detectors) == 2


@pytest.mark.parametrize(
    "cfg",
    [
        {"kind": "wavelet"},
        {},
        {"kind": "composite", "detectors": []},
        {"kind": "fractal", "window": 0},
        "fractal",
    ],
)
def test_build_detector_errors(cfg):
    with pytest.raises(ValueError):
        build_detector(cfg)


def test_build_filters():
    f = build_filter({"kind": "magnitude", "relative_threshold": 0.3})
    assert f == MinMagnitudeSwingFilter(0.3)
    chain = build_filter([{"kind": "magnitude"}, {"kind": "magnitude", "relative_threshold": 1.0}])
    assert isinstance(chain, ChainedSwingFilter)
    with pytest.raises(ValueError):
        build_filter({"kind": "duration"})


def test_build_profile():
    p = build_profile({"weights": {"fibonacci": 0.5, "channel": 0.0}, "name": "fib-heavy"})
    weights = {f.category.value: w for f, w in p.entries}
    assert weights == {"fibonacci": 0.5, "time": 0.20, "alternation": 0.15, "channel": 0.0, "completeness": 0.15}
    assert p.name == "fib-heavy"
    with pytest.raises(ValueError):
        build_profile({"weights": {"volume": 1.0}})
    with pytest.raises(ValueError):
        build_profile({"weights": {"time": -1.0}})


def test_build_model():
    assert isinstance(build_model(None), ConfidenceModel)

    stock = build_model({"fibonacci": {"tolerance": 0.1}})
    assert stock.fibonacci.tolerance == 0.1
    assert ScenarioType.IMPULSE in stock.overrides

    custom = build_model(
        {
            "default": {"weights": {"fibonacci": 1.0}},
            "overrides": {"corrective_flat": {"weights": {"completeness": 0.6}}},
        }
    )
    assert set(custom.overrides) == {ScenarioType.CORRECTIVE_FLAT}
    assert custom.profile_for(ScenarioType.CORRECTIVE_FLAT).name == "corrective_flat"
    assert custom.profile_for(ScenarioType.IMPULSE) is custom.default_profile
    with pytest.raises(ValueError):
        build_model({"overrides": {"diagonal": {}}})
