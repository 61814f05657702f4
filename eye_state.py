# eye_state.py
"""Calibrated closed-eye threshold and per-tick eye state classification."""
from dataclasses import dataclass
import logging
import math

import config

logger = logging.getLogger(__name__)


@dataclass
class ThresholdState:
    min_observed_ear: float = math.inf
    max_observed_ear: float = 0.0
    operative_threshold: float = config.FLOOR_THRESHOLD
    relaxed: bool = False


def is_eye_closed(ear: float, threshold: float, relaxed: bool = False,
                  hysteresis: float = config.HYSTERESIS) -> bool:
    return ear < threshold + (hysteresis if relaxed else 0.0)


class CalibrationController:
    """
    Learns the user's smallest EAR while they blink and derives the
    operative threshold from it: max(floor, min_observed + margin).
    """

    def __init__(self, state: ThresholdState,
                 floor: float = config.FLOOR_THRESHOLD,
                 margin: float = config.CALIBRATION_MARGIN):
        self.state = state
        self.floor = floor
        self.margin = margin

    def observe(self, left_ear: float, right_ear: float) -> float:
        samples = [e for e in (left_ear, right_ear) if math.isfinite(e)]
        if not samples:
            return self.state.operative_threshold

        s = self.state
        s.min_observed_ear = min(s.min_observed_ear, *samples)
        s.max_observed_ear = max(s.max_observed_ear, *samples)
        s.operative_threshold = max(self.floor, s.min_observed_ear + self.margin)
        logger.debug(f"calibration: min={s.min_observed_ear:.3f} max={s.max_observed_ear:.3f} "
                     f"threshold={s.operative_threshold:.3f}")
        return s.operative_threshold


class EyeStateClassifier:
    """Both-eyes-closed decision with a one-tick hysteresis on the threshold."""

    def __init__(self, state: ThresholdState, hysteresis: float = config.HYSTERESIS):
        self.state = state
        self.hysteresis = hysteresis

    def classify(self, left_ear: float, right_ear: float) -> bool:
        threshold = self.state.operative_threshold
        relaxed = self.state.relaxed
        both_closed = (is_eye_closed(left_ear, threshold, relaxed, self.hysteresis)
                       and is_eye_closed(right_ear, threshold, relaxed, self.hysteresis))
        self.state.relaxed = both_closed
        return both_closed
