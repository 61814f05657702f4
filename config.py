# config.py
# Runtime settings. Everything can be overridden through the environment.
import os

# Server
SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("PORT", "3000"))
SERVER_URL = os.getenv("SERVER_URL", f"http://localhost:{SERVER_PORT}")  # where the listener fetches audio
LISTENER_URL = os.getenv("LISTENER_URL", "http://localhost:8501")        # streamlit listener client

# Storage
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()  # "local" or "s3"
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "./uploads")
METADATA_FILE = os.getenv("METADATA_FILE", "./metadata.json")
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "50"))
S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME", "your-audio-bucket-name")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
S3_KEY_PREFIX = "audio/"

# Eye detection
SAMPLE_PERIOD_SECONDS = float(os.getenv("SAMPLE_PERIOD_MS", "100")) / 1000.0
FLOOR_THRESHOLD = 0.285   # operative threshold never calibrates below this
CALIBRATION_MARGIN = 0.015
HYSTERESIS = 0.015        # added to the threshold while already closed

# Playback
PLAYBACK_VOLUME = float(os.getenv("PLAYBACK_VOLUME", "0.5"))

# Speech
SPEECH_RATE = 1.3         # relative to the engine's default rate
SPEECH_VOLUME = 0.4
SPEECH_SETTLE_SECONDS = 0.1
INSTRUCTIONS = (
    "Please wait a few seconds for models to load."
    " When you see your facial features detected, blink slowly for 5 seconds"
    " to help the camera calibrate to your eye shape."
    " Then, click or tap any key to toggle calibration mode off."
)
