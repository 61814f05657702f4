# listener.py
"""
Listening session: calibration first, then eyes-closed playback gating.

One ListenSession per listener. The sampling loop calls tick() with the
detections for the latest frame; user interaction (tap, click, key) is
passed in through user_interaction().
"""
from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import Optional

import config
from audio_session import LoadError
from eye_state import ThresholdState, CalibrationController, EyeStateClassifier
from playback import PlaybackGate, GateState
from utils import eye_aspect_ratio

logger = logging.getLogger(__name__)


class Mode(Enum):
    CALIBRATING = "calibrating"
    ACTIVE = "active"


@dataclass
class TickResult:
    mode: Mode
    face: bool
    left_ear: Optional[float] = None
    right_ear: Optional[float] = None
    eyes_closed: Optional[bool] = None
    title: str = "W A I T"
    title_visible: bool = True
    bottom_note: str = ""
    grayscale: bool = False


class ListenSession:
    def __init__(self, file_id, audio, prompter=None, volume=config.PLAYBACK_VOLUME):
        self.file_id = file_id
        self.audio = audio
        self.prompter = prompter
        self.mode = Mode.CALIBRATING
        self.detection_started = False
        self.threshold = ThresholdState()
        self.calibration = CalibrationController(self.threshold)
        self.classifier = EyeStateClassifier(self.threshold)
        self.gate = PlaybackGate(audio, volume=volume)

    def ensure_audio(self):
        """Load the audio once; a failure leaves the session silent but alive."""
        if self.audio.has_buffer:
            return True
        try:
            self.audio.load(self.file_id)
        except LoadError:
            logger.exception("Error initializing audio")
            return False
        return True

    def start_detection(self):
        self.detection_started = True

    def stop_detection(self):
        """Camera went away: treat it as eyes open so audio pauses at its position."""
        self.detection_started = False
        self.threshold.relaxed = False
        self.gate.update(False)

    def user_interaction(self):
        """
        Handle a tap, click or key press. Loads audio if it is still missing,
        and ends calibration the first time it happens after detection has
        started. Returns True only for the interaction that ended calibration.
        """
        self.ensure_audio()
        if self.mode is not Mode.CALIBRATING or not self.detection_started:
            return False
        self.mode = Mode.ACTIVE
        logger.info(f"Calibration finished, threshold={self.threshold.operative_threshold:.3f}")
        if self.prompter is not None:
            self.prompter.cancel()
        return True

    def tick(self, detections):
        if not detections:
            return self._result(face=False)

        # only the first face is used
        face = detections[0]
        left_ear = eye_aspect_ratio(face.left_eye)
        right_ear = eye_aspect_ratio(face.right_eye)

        if self.mode is Mode.CALIBRATING:
            self.calibration.observe(left_ear, right_ear)
            return self._result(face=True, left_ear=left_ear, right_ear=right_ear)

        closed = self.classifier.classify(left_ear, right_ear)
        self.gate.update(closed)
        return self._result(face=True, left_ear=left_ear, right_ear=right_ear, eyes_closed=closed)

    def _result(self, face, **kwargs):
        result = TickResult(mode=self.mode, face=face, **kwargs)
        if self.mode is Mode.CALIBRATING:
            if face:
                result.title = "blink! blink!"
                result.bottom_note = "TAP or CLICK to listen"
        else:
            result.title = "close your eyes"
            closed = self.gate.state is GateState.CLOSED
            result.title_visible = not closed
            result.grayscale = not closed
        return result


class Sampler:
    """
    Fixed-period tick scheduler. When a tick overruns its period the missed
    ticks are skipped rather than queued.
    """

    def __init__(self, period=config.SAMPLE_PERIOD_SECONDS, clock=time.monotonic, sleep=time.sleep):
        self.period = period
        self.clock = clock
        self.sleep = sleep
        self.next_tick = None
        self.skipped = 0

    def wait(self):
        """Block until the next tick boundary; returns how many ticks were skipped."""
        now = self.clock()
        if self.next_tick is None:
            self.next_tick = now + self.period
            return 0

        skipped = 0
        if now >= self.next_tick + self.period:
            skipped = int((now - self.next_tick) // self.period)
            self.next_tick += skipped * self.period
            self.skipped += skipped
            logger.debug(f"detection overran the sampling period, skipped {skipped} tick(s)")

        delay = self.next_tick - now
        if delay > 0:
            self.sleep(delay)
        self.next_tick += self.period
        return skipped
