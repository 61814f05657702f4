# voice.py
import logging
import threading

import pyttsx3

import config

logger = logging.getLogger(__name__)


class CapabilityUnavailable(Exception):
    """The speech engine could not be initialized on this machine."""


class VoicePrompter:
    """
    Best-effort spoken instructions. Any in-flight utterance is cancelled
    before a new one, and the new one waits a short settle delay so the
    engine has finished stopping.
    """

    def __init__(self, engine_factory=pyttsx3.init, timer_factory=threading.Timer,
                 rate=config.SPEECH_RATE, volume=config.SPEECH_VOLUME,
                 settle_seconds=config.SPEECH_SETTLE_SECONDS):
        self.engine_factory = engine_factory
        self.timer_factory = timer_factory
        self.rate = rate
        self.volume = volume
        self.settle_seconds = settle_seconds
        self._engine = None
        self._prompted = False
        self._pending = None

    def engine(self):
        if self._engine is None:
            try:
                engine = self.engine_factory()
            except Exception as e:
                raise CapabilityUnavailable(f"speech synthesis not supported: {e}") from e

            engine.setProperty("rate", int(engine.getProperty("rate") * self.rate))
            engine.setProperty("volume", self.volume)
            voices = engine.getProperty("voices") or []
            if voices:
                logger.info(f"Setting voice: {voices[0].name}")
                engine.setProperty("voice", voices[0].id)
            else:
                logger.info("No voice set, using default")
            self._engine = engine
        return self._engine

    def speak(self, text):
        logger.info(f"Attempting to say: {text}")
        try:
            engine = self.engine()
        except CapabilityUnavailable as e:
            logger.error(str(e))
            return False

        self.cancel()
        self._pending = self.timer_factory(self.settle_seconds, self._say, args=(engine, text))
        self._pending.daemon = True
        self._pending.start()
        return True

    def prompt_once(self, text):
        if self._prompted:
            return False
        self._prompted = True
        return self.speak(text)

    def cancel(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._engine is not None and self._engine.isBusy():
            logger.info("Speech synthesis is already speaking, cancelling...")
            self._engine.stop()

    def _say(self, engine, text):
        try:
            engine.say(text)
            engine.runAndWait()
        except RuntimeError:
            logger.exception("Speech error")
