import math
from types import SimpleNamespace

import numpy as np
import pytest

from utils import eye_aspect_ratio, detections_from_face_mesh, LEFT_EYE_IDX, RIGHT_EYE_IDX

OPEN_EYE = np.array([
    [0, 0],    # p1
    [1, 3],    # p2
    [2, 3],    # p3
    [4, 0],    # p4
    [2, -3],   # p5
    [1, -3],   # p6
], dtype=np.float32)

CLOSED_EYE = np.array([
    [0, 0],
    [1, 0.2],
    [2, 0.2],
    [4, 0],
    [2, -0.2],
    [1, -0.2],
], dtype=np.float32)


def test_ear_open_eye():
    # (6 + 6) / (2 * 4)
    assert eye_aspect_ratio(OPEN_EYE) == pytest.approx(1.5)


def test_ear_closed_eye():
    assert eye_aspect_ratio(CLOSED_EYE) < 0.2


def test_ear_non_negative():
    rng = np.random.default_rng(7)
    for _ in range(50):
        pts = rng.uniform(-100, 100, size=(6, 2))
        assert eye_aspect_ratio(pts) >= 0


def test_ear_translation_invariant():
    shifted = OPEN_EYE + np.array([250.5, -40.25])
    assert eye_aspect_ratio(shifted) == pytest.approx(eye_aspect_ratio(OPEN_EYE))


def test_ear_degenerate_corners_reads_as_open():
    pts = OPEN_EYE.copy()
    pts[3] = pts[0]
    assert eye_aspect_ratio(pts) == math.inf


def test_ear_rejects_wrong_point_count():
    with pytest.raises(ValueError):
        eye_aspect_ratio(OPEN_EYE[:5])


def test_detections_from_face_mesh():
    landmarks = [SimpleNamespace(x=i / 1000.0, y=i / 2000.0) for i in range(478)]
    results = SimpleNamespace(multi_face_landmarks=[SimpleNamespace(landmark=landmarks)])

    detections = detections_from_face_mesh(results, w=1000, h=2000)

    assert len(detections) == 1
    assert detections[0].left_eye.shape == (6, 2)
    assert detections[0].left_eye[0] == pytest.approx([LEFT_EYE_IDX[0], LEFT_EYE_IDX[0]])
    assert detections[0].right_eye[3] == pytest.approx([RIGHT_EYE_IDX[3], RIGHT_EYE_IDX[3]])


def test_detections_from_face_mesh_no_face():
    assert detections_from_face_mesh(SimpleNamespace(multi_face_landmarks=None), 640, 480) == []
