# utils.py
from dataclasses import dataclass
import math

import numpy as np

# MediaPipe FaceMesh indices, ordered p1..p6:
# outer corner, upper-1, upper-2, inner corner, lower-2, lower-1
RIGHT_EYE_IDX = [33, 160, 158, 133, 153, 144]
LEFT_EYE_IDX = [362, 385, 387, 263, 373, 380]


@dataclass
class EyeDetection:
    """Six landmark points per eye for a single detected face."""
    left_eye: np.ndarray
    right_eye: np.ndarray


def eye_aspect_ratio(points):
    """
    Eye openness from six landmarks: the two corners at index 0 and 3,
    the upper lid at 1 and 2, the lower lid at 5 and 4. Returns the mean
    of the two vertical lid gaps divided by the corner-to-corner width.

    Raises ValueError unless `points` is 6 rows of (x, y). Coincident
    corners give math.inf, so a collapsed detection counts as an open eye.
    """
    p = np.asarray(points, dtype=np.float64)
    if p.shape != (6, 2):
        raise ValueError(f"expected 6 (x, y) eye points, got shape {p.shape}")
    A = np.linalg.norm(p[1] - p[5])
    B = np.linalg.norm(p[2] - p[4])
    C = np.linalg.norm(p[0] - p[3])
    if C == 0:
        return math.inf
    return float((A + B) / (2.0 * C))


def detections_from_face_mesh(results, w, h):
    """Convert FaceMesh results into EyeDetection objects in pixel coordinates."""
    if not results.multi_face_landmarks:
        return []

    detections = []
    for face_landmarks in results.multi_face_landmarks:
        def coords(indices):
            return np.array([[face_landmarks.landmark[i].x * w,
                              face_landmarks.landmark[i].y * h] for i in indices])

        detections.append(EyeDetection(left_eye=coords(LEFT_EYE_IDX),
                                       right_eye=coords(RIGHT_EYE_IDX)))
    return detections
