# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

import numpy as np

# (width, height) in pixels or inner corners, OpenCV ordering
Size = tuple[int, int]


@runtime_checkable
class CaptureDevice(Protocol):
    """Synchronous video source addressed by an integer index."""

    def open(self, index: int) -> bool:
        """Open the device and report whether it is ready for reads."""
        ...

    def is_opened(self) -> bool:
        ...

    def read(self) -> tuple[bool, Optional[np.ndarray]]:
        """Grab the next frame; the flag is False when the read failed."""
        ...

    def release(self) -> None:
        ...


@runtime_checkable
class VisionBackend(Protocol):
    """Checkerboard detection, calibration solving and distortion correction."""

    def find_chessboard_corners(
        self, image: np.ndarray, pattern_size: Size
    ) -> tuple[bool, Optional[np.ndarray]]:
        """Locate the inner corners of a checkerboard with the given grid size."""
        ...

    def draw_chessboard_corners(
        self,
        image: np.ndarray,
        pattern_size: Size,
        corners: Optional[np.ndarray],
        found: bool,
    ) -> np.ndarray:
        """Return a copy of the image with detected corners drawn on it."""
        ...

    def calibrate_camera(
        self,
        object_points: Sequence[np.ndarray],
        image_points: Sequence[np.ndarray],
        image_size: Size,
    ) -> tuple[float, np.ndarray, np.ndarray, Sequence[np.ndarray], Sequence[np.ndarray]]:
        """Solve intrinsics from world/image correspondences.

        Returns (rms, camera_matrix, dist_coeffs, rvecs, tvecs).
        """
        ...

    def optimal_new_camera_matrix(
        self, camera_matrix: np.ndarray, dist_coeffs: np.ndarray, image_size: Size
    ) -> np.ndarray:
        ...

    def init_undistort_rectify_map(
        self,
        camera_matrix: np.ndarray,
        dist_coeffs: np.ndarray,
        new_camera_matrix: np.ndarray,
        image_size: Size,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Build a reusable pixel remap table."""
        ...

    def remap(
        self, image: np.ndarray, map1: np.ndarray, map2: np.ndarray
    ) -> np.ndarray:
        ...

    def undistort(
        self,
        image: np.ndarray,
        camera_matrix: np.ndarray,
        dist_coeffs: np.ndarray,
        new_camera_matrix: np.ndarray,
    ) -> np.ndarray:
        ...


@runtime_checkable
class PreviewWindow(Protocol):
    """Interactive preview surface with keyboard polling."""

    def show(self, window_name: str, image: np.ndarray) -> None:
        ...

    def wait_key(self, delay_ms: int) -> int:
        """Wait up to delay_ms for a key press; -1 when no key was pressed."""
        ...

    def close(self, window_name: str) -> None:
        ...
