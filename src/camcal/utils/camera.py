# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from typing import Optional
import sys

import cv2
import numpy as np


def capture_backends() -> list[int]:
    """Return OpenCV capture backends to try, in order, for this platform."""
    if sys.platform.startswith("win"):
        return [cv2.CAP_DSHOW, cv2.CAP_ANY]
    if sys.platform == "darwin":
        return [cv2.CAP_AVFOUNDATION, cv2.CAP_ANY]
    return [cv2.CAP_V4L2, cv2.CAP_ANY]


def open_camera(idx: int) -> cv2.VideoCapture:
    """Open a camera using platform-appropriate OpenCV backends.

    Tries DirectShow on Windows, AVFoundation on macOS and V4L2 on Linux before
    falling back to CAP_ANY. Returns the first successfully opened capture.

    Args:
        idx (int): The index of the camera to open.

    Returns:
        cv2.VideoCapture: An opened OpenCV VideoCapture object ready for frame reads.

    Raises:
        RuntimeError: If the camera cannot be opened with any backend.
    """
    last_error: Optional[str] = None
    for backend in capture_backends():
        cap = (
            cv2.VideoCapture(idx, backend)
            if backend != cv2.CAP_ANY
            else cv2.VideoCapture(idx)
        )
        if cap.isOpened():
            return cap
        cap.release()
        last_error = f"backend={backend}"

    msg = f"Cannot open camera at index {idx}"
    if last_error:
        msg += f" (last tried {last_error})"
    msg += ". Check --camera-index / CAMERA_INDEX and camera permissions."
    raise RuntimeError(msg)


def read_frame(cap: cv2.VideoCapture) -> tuple[bool, Optional[np.ndarray]]:
    """Read a single frame from an opened capture.

    Returns:
        Tuple[bool, Optional[np.ndarray]]: success flag and the frame (None on failure).
    """
    ok, frame = cap.read()
    if not ok or frame is None or frame.size == 0:
        return False, None
    return True, frame
