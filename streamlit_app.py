# streamlit_app.py
# Listener client: close your eyes to hear the shared audio.
# Run locally so it can reach the webcam: `streamlit run streamlit_app.py`
import logging

import cv2
import mediapipe as mp
import streamlit as st

import config
from audio_session import AudioSession
from listener import ListenSession, Sampler
from utils import detections_from_face_mesh
from voice import VoicePrompter

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("listen-client")

st.set_page_config(page_title="Listen with your eyes closed", layout="wide")

file_id = st.query_params.get("file_id", "default")

if "listen" not in st.session_state:
    st.session_state.listen = ListenSession(file_id, AudioSession(config.SERVER_URL), VoicePrompter())
    st.session_state.running = False
session = st.session_state.listen

session.prompter.prompt_once(config.INSTRUCTIONS)

col_video, col_controls = st.columns([3, 1])
with col_controls:
    start = st.button("Start Webcam")
    stop = st.button("Stop Webcam")
    if st.button("Tap to listen"):
        session.user_interaction()
with col_video:
    TITLE = st.empty()
    FRAME_WINDOW = st.image([])
    NOTE = st.empty()

if start:
    st.session_state.running = True
if stop:
    st.session_state.running = False
    session.stop_detection()

# MediaPipe setup
mp_face_mesh = mp.solutions.face_mesh
face_mesh = mp_face_mesh.FaceMesh(static_image_mode=False,
                                  max_num_faces=1,
                                  refine_landmarks=True,
                                  min_detection_confidence=0.5,
                                  min_tracking_confidence=0.5)

TITLE.markdown("## W A I T")

if st.session_state.running:
    cap = cv2.VideoCapture(0)
    if not cap.isOpened():
        cap = cv2.VideoCapture(1)
    if not cap.isOpened():
        st.error("Could not open webcam. Make sure your webcam is connected and allowed.")
    else:
        session.start_detection()
        sampler = Sampler(config.SAMPLE_PERIOD_SECONDS)
        try:
            while st.session_state.running:
                sampler.wait()
                ret, frame = cap.read()
                if not ret:
                    continue

                h, w, _ = frame.shape
                results = face_mesh.process(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
                status = session.tick(detections_from_face_mesh(results, w, h))

                frame = cv2.GaussianBlur(frame, (9, 9), 0)
                if status.grayscale:
                    frame = cv2.cvtColor(cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY), cv2.COLOR_GRAY2BGR)

                TITLE.markdown(f"## {status.title}" if status.title_visible else "&nbsp;")
                NOTE.markdown(f"*{status.bottom_note}*" if status.bottom_note else "&nbsp;")
                FRAME_WINDOW.image(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        except Exception as e:
            logger.exception("Streaming loop exited")
            session.stop_detection()
            st.error(f"Streaming loop exited: {e}")
        finally:
            cap.release()
else:
    st.info("Press **Start Webcam**, blink slowly for a few seconds, then press **Tap to listen**.")
