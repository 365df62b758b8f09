#!/usr/bin/env python3
"""
Accumulation settings with range clamping.
"""

from __future__ import annotations

from typing import Any, Dict

from ..exceptions import ConfigurationError
from ..utils.constants import (
    AGGREGATION_WINDOW_MAX_S,
    AGGREGATION_WINDOW_MIN_S,
    CROP_FRACTION_MAX,
    CROP_FRACTION_MIN,
    DEFAULT_AGGREGATION_WINDOW_S,
    DEFAULT_CROP_FRACTION,
)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _as_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Setting '{name}' must be numeric", {name: value}) from None


class AccumulationSettings:
    """Operator-tunable values read by the accumulator on every frame.

    Out-of-range values are clamped rather than rejected: the crop fraction
    to [0, 1] and the aggregation window to [0, 120] seconds.
    """

    def __init__(
        self,
        crop_fraction: float = DEFAULT_CROP_FRACTION,
        aggregation_window_s: float = DEFAULT_AGGREGATION_WINDOW_S,
    ) -> None:
        self.crop_fraction = crop_fraction
        self.aggregation_window_s = aggregation_window_s

    @property
    def crop_fraction(self) -> float:
        return self._crop_fraction

    @crop_fraction.setter
    def crop_fraction(self, value: float) -> None:
        self._crop_fraction = _clamp(_as_float("crop_fraction", value), CROP_FRACTION_MIN, CROP_FRACTION_MAX)

    @property
    def aggregation_window_s(self) -> float:
        return self._aggregation_window_s

    @aggregation_window_s.setter
    def aggregation_window_s(self, value: float) -> None:
        self._aggregation_window_s = _clamp(
            _as_float("aggregation_window_s", value), AGGREGATION_WINDOW_MIN_S, AGGREGATION_WINDOW_MAX_S
        )

    @property
    def enabled(self) -> bool:
        return self._crop_fraction > 0

    @classmethod
    def from_config(cls, config) -> "AccumulationSettings":
        cfg = config.get_autocrop_config()
        crop = cfg.get("crop_fraction", DEFAULT_CROP_FRACTION)
        if not cfg.get("enabled", True):
            crop = 0.0
        return cls(
            crop_fraction=crop,
            aggregation_window_s=cfg.get("aggregation_window_s", DEFAULT_AGGREGATION_WINDOW_S),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "crop_fraction": self.crop_fraction,
            "aggregation_window_s": self.aggregation_window_s,
        }

    def __repr__(self) -> str:
        return (
            f"AccumulationSettings(crop_fraction={self.crop_fraction}, "
            f"aggregation_window_s={self.aggregation_window_s})"
        )
