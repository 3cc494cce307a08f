# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
import logging
from typing import Optional

import cv2
import numpy as np

from camcal.utils.camera import open_camera, read_frame

logger = logging.getLogger(__name__)


class OpenCvCaptureDevice:
    """CaptureDevice backed by cv2.VideoCapture."""

    def __init__(self) -> None:
        self._cap: Optional[cv2.VideoCapture] = None

    def open(self, index: int) -> bool:
        """Open the camera at index, releasing any previously opened handle.

        Returns:
            True when a backend opened the device, False otherwise.
        """
        self.release()
        try:
            self._cap = open_camera(index)
        except RuntimeError as err:
            logger.warning(
                "Camera open failed", extra={"camera_id": index, "error": str(err)}
            )
            return False
        logger.info("Camera opened", extra={"camera_id": index})
        return True

    def is_opened(self) -> bool:
        return self._cap is not None and bool(self._cap.isOpened())

    def read(self) -> tuple[bool, Optional[np.ndarray]]:
        if self._cap is None:
            return False, None
        ok, frame = read_frame(self._cap)
        return bool(ok), frame

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None


class OpenCvPreviewWindow:
    """PreviewWindow backed by OpenCV highgui."""

    def show(self, window_name: str, image: np.ndarray) -> None:
        cv2.imshow(window_name, image)

    def wait_key(self, delay_ms: int) -> int:
        key = cv2.waitKey(delay_ms)
        return -1 if key == -1 else key & 0xFF

    def close(self, window_name: str) -> None:
        cv2.destroyWindow(window_name)
