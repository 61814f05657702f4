# audio_session.py
"""
Owns the decoded audio buffer, the audio clock and the single live playback
handle. Fetch and decode are the only blocking waits in the listener; every
failure is logged here and never reaches the sampling loop.
"""
from dataclasses import dataclass
import io
import logging
import os
import time

import numpy as np
import pygame
import requests
import simpleaudio as sa

logger = logging.getLogger(__name__)

DECODE_RATE = 44100
DECODE_CHANNELS = 2


class LoadError(Exception):
    """Audio could not be fetched or decoded."""


@dataclass(frozen=True)
class AudioBuffer:
    samples: np.ndarray  # int16, shape (frames, channels)
    sample_rate: int

    @property
    def num_channels(self):
        return self.samples.shape[1]

    @property
    def duration(self):
        return self.samples.shape[0] / float(self.sample_rate)


@dataclass
class PlaybackHandle:
    play_obj: object
    from_position: float
    started_at: float


def _init_decoder():
    # pygame only decodes here; output goes through simpleaudio, so no real device is needed
    if pygame.mixer.get_init():
        return pygame.mixer.get_init()
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
    try:
        pygame.mixer.init(frequency=DECODE_RATE, size=-16, channels=DECODE_CHANNELS)
    except pygame.error as e:
        raise LoadError(f"audio decoder unavailable: {e}") from e
    return pygame.mixer.get_init()


def decode_audio(data: bytes) -> AudioBuffer:
    """
    Decode MP3, OGG, FLAC, WAV or AIFF bytes into an int16 buffer at the
    decoder's output rate and channel count.
    """
    rate, _, channels = _init_decoder()
    try:
        sound = pygame.mixer.Sound(file=io.BytesIO(data))
    except pygame.error as e:
        raise LoadError(f"unable to decode audio: {e}") from e

    samples = pygame.sndarray.array(sound).astype(np.int16)
    samples = samples.reshape(samples.shape[0], channels)
    if samples.shape[0] == 0:
        raise LoadError("audio contains no frames")
    return AudioBuffer(samples=samples, sample_rate=rate)


class AudioSession:
    def __init__(self, server_url, http_get=requests.get, player=sa,
                 clock=time.monotonic, timeout=30):
        self.server_url = server_url.rstrip("/")
        self.http_get = http_get
        self.player = player
        self.clock = clock
        self.timeout = timeout
        self.buffer = None
        self._epoch = clock()

    @property
    def current_time(self):
        """Seconds on the session's audio clock."""
        return self.clock() - self._epoch

    @property
    def has_buffer(self):
        return self.buffer is not None

    def load(self, file_id):
        url = f"{self.server_url}/audio/{file_id}"
        logger.info(f"Loading audio file with fileId: {file_id}")
        try:
            try:
                resp = self.http_get(url, timeout=self.timeout)
            except requests.RequestException as e:
                raise LoadError(f"Failed to load audio file: {e}") from e
            if resp.status_code != 200:
                raise LoadError(f"Failed to load audio file: {resp.status_code} {resp.reason}")
            self.buffer = decode_audio(resp.content)
        except LoadError:
            self.buffer = None
            raise

        logger.info(f"Audio initialized successfully, buffer duration: {self.buffer.duration:.2f}s")
        return self.buffer

    def start_playback(self, from_position, volume=0.5):
        if self.buffer is None:
            logger.info("Cannot play audio: buffer not loaded")
            return None

        offset = int(round(from_position * self.buffer.sample_rate))
        if offset >= self.buffer.samples.shape[0]:
            logger.info(f"Nothing left to play at position {from_position:.2f}s "
                        f"(duration {self.buffer.duration:.2f}s)")
            return None

        chunk = np.clip(self.buffer.samples[offset:].astype(np.float32) * volume,
                        -32768, 32767).astype(np.int16)
        logger.info(f"Starting audio from position: {from_position:.2f}s")
        try:
            play_obj = self.player.play_buffer(np.ascontiguousarray(chunk),
                                               self.buffer.num_channels, 2,
                                               self.buffer.sample_rate)
        except Exception:
            logger.exception("Failed to start audio")
            return None
        return PlaybackHandle(play_obj=play_obj, from_position=from_position,
                              started_at=self.current_time)

    def stop_playback(self, handle):
        handle.play_obj.stop()
