# playback.py
"""Eyes-closed playback gate."""
from enum import Enum
import logging

import config

logger = logging.getLogger(__name__)


class GateState(Enum):
    OPEN = "open"
    CLOSED = "closed"


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackGate:
    """
    Consumes one eye-state sample per tick and drives the audio session.

    Open -> Closed starts playback from the resume position. Closed -> Open
    stops it and advances the resume position by the time it was playing.
    A tick without a face (eyes_closed is None) changes nothing.
    """

    def __init__(self, audio, volume=config.PLAYBACK_VOLUME):
        self.audio = audio
        self.volume = volume
        self.state = GateState.OPEN
        self.resume_position = 0.0
        self.segment_start = None
        self.elapsed = 0.0
        self.handle = None

    @property
    def playback_state(self):
        if self.handle is not None:
            return PlaybackState.PLAYING
        if self.resume_position > 0.0:
            return PlaybackState.PAUSED
        return PlaybackState.IDLE

    def update(self, eyes_closed):
        if eyes_closed is None:
            return self.state

        if eyes_closed:
            if self.state is GateState.OPEN:
                logger.info("both eyes closed, playing audio")
                self.state = GateState.CLOSED
            self._play_if_idle()
            if self.segment_start is not None:
                self.elapsed = self.audio.current_time - self.segment_start
        elif self.state is GateState.CLOSED:
            logger.info("eyes open, stopping audio")
            self.state = GateState.OPEN
            self._pause()
        return self.state

    def _play_if_idle(self):
        if self.handle is not None or not self.audio.has_buffer:
            return
        handle = self.audio.start_playback(self.resume_position, self.volume)
        # segment clock starts with real playback; closed time with no audio never advances resume_position
        if handle is not None:
            self.handle = handle
            self.segment_start = self.audio.current_time
            self.elapsed = 0.0

    def _pause(self):
        if self.segment_start is not None:
            self.elapsed = self.audio.current_time - self.segment_start
            self.resume_position += max(0.0, self.elapsed)
            self.segment_start = None
            self.elapsed = 0.0
        if self.handle is not None:
            self.audio.stop_playback(self.handle)
            self.handle = None
        logger.debug(f"resume position now {self.resume_position:.2f}s")
