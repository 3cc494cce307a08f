# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT

import numpy as np
import cv2

_INFO_COLOR = (0, 255, 0)
_INFO_FONT = cv2.FONT_HERSHEY_COMPLEX_SMALL
_INFO_SCALE = 0.8


def frame_size(frame: np.ndarray) -> tuple[int, int]:
    """Return (width, height) of a frame, OpenCV size ordering."""
    h, w = frame.shape[:2]
    return int(w), int(h)


def is_empty(frame: np.ndarray | None) -> bool:
    return frame is None or frame.size == 0


def put_calibration_info(image: np.ndarray, captured: int, target: int) -> np.ndarray:
    """Draw the calibration title and capture progress onto image in place.

    Args:
        image: BGR frame to annotate.
        captured: Number of views stored so far.
        target: Number of views required before solving.

    Returns:
        The same image, for chaining.
    """
    cv2.putText(
        image,
        "Camera Calibration",
        (30, 30),
        _INFO_FONT,
        _INFO_SCALE,
        _INFO_COLOR,
        1,
        cv2.LINE_AA,
    )
    cv2.putText(
        image,
        f"Image: {captured}/{target}",
        (30, 50),
        _INFO_FONT,
        _INFO_SCALE,
        _INFO_COLOR,
        1,
        cv2.LINE_AA,
    )
    return image


def chessboard_object_points(
    pattern_size: tuple[int, int], square_size: float
) -> np.ndarray:
    """World coordinates of checkerboard inner corners on the z=0 plane.

    Points are ordered row by row, matching the order OpenCV reports detected
    corners in.

    Returns:
        float32 array of shape (width * height, 3).
    """
    width, height = pattern_size
    points = np.zeros((width * height, 3), np.float32)
    points[:, :2] = np.mgrid[0:width, 0:height].T.reshape(-1, 2)
    points *= square_size
    return points
