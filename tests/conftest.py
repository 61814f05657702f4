import io
import os
import struct
import sys
import wave

import numpy as np
import pytest

# Ensure project root is on sys.path so the top-level modules import
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, PROJECT_ROOT)


def make_wav(seconds=1.0, rate=8000, channels=1, sample_width=2):
    frames = int(seconds * rate)
    t = np.arange(frames) / rate
    tone = (np.sin(2 * np.pi * 440 * t) * 8000).astype(np.int16)
    pcm = np.repeat(tone[:, None], channels, axis=1)
    if sample_width == 1:
        raw = ((pcm >> 8) + 128).astype(np.uint8).tobytes()
    else:
        raw = pcm.astype("<i2").tobytes()
    buf = io.BytesIO()
    with wave.open(buf, "wb") as w:
        w.setnchannels(channels)
        w.setsampwidth(sample_width)
        w.setframerate(rate)
        w.writeframes(raw)
    return buf.getvalue()


def _extended(rate):
    """80-bit IEEE extended float as used for the AIFF sample rate."""
    bits = int(rate).bit_length()
    return struct.pack(">HQ", 16383 + bits - 1, int(rate) << (64 - bits))


def make_aiff(seconds=0.5, rate=8000):
    frames = int(seconds * rate)
    t = np.arange(frames) / rate
    data = (np.sin(2 * np.pi * 440 * t) * 8000).astype(">i2").tobytes()
    comm = struct.pack(">hIh", 1, frames, 16) + _extended(rate)
    ssnd = struct.pack(">II", 0, 0) + data
    body = (b"AIFF" + b"COMM" + struct.pack(">I", len(comm)) + comm
            + b"SSND" + struct.pack(">I", len(ssnd)) + ssnd)
    return b"FORM" + struct.pack(">I", len(body)) + body


def make_mp3_silence(frames=40):
    # MPEG-1 layer III, 128 kbps, 44.1 kHz: 417-byte frames, zeroed side info decodes to silence
    frame = b"\xff\xfb\x90\x64" + bytes(413)
    return frame * frames


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakePlayObject:
    def __init__(self):
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakePlayer:
    """Stands in for simpleaudio; records every play_buffer call."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def play_buffer(self, audio_data, num_channels, bytes_per_sample, sample_rate):
        if self.fail:
            raise RuntimeError("no audio device")
        self.calls.append((audio_data, num_channels, bytes_per_sample, sample_rate))
        return FakePlayObject()


class FakeResponse:
    def __init__(self, status_code=200, content=b"", reason="OK"):
        self.status_code = status_code
        self.content = content
        self.reason = reason


class FakeHttp:
    """Returns queued responses in order and remembers the URLs asked for."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def __call__(self, url, timeout=None):
        self.urls.append(url)
        return self.responses.pop(0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def wav_bytes():
    return make_wav()
