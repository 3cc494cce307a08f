# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

from typing import Optional, Sequence

import cv2
import numpy as np

from camcal.config import config
from camcal.core.contracts import Size

_FIND_FLAGS = cv2.CALIB_CB_ADAPTIVE_THRESH | cv2.CALIB_CB_NORMALIZE_IMAGE
_SUBPIX_CRITERIA = (cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER, 30, 0.001)


def _to_gray(image: np.ndarray) -> np.ndarray:
    if image.ndim == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


class OpenCvVision:
    """VisionBackend implemented with OpenCV calib3d and imgproc."""

    def __init__(self, refine_corners: Optional[bool] = None) -> None:
        """
        Args:
            refine_corners: Run cornerSubPix after a successful detection.
                Defaults to config.REFINE_CORNERS.
        """
        self.refine_corners = (
            config.REFINE_CORNERS if refine_corners is None else refine_corners
        )

    def find_chessboard_corners(
        self, image: np.ndarray, pattern_size: Size
    ) -> tuple[bool, Optional[np.ndarray]]:
        gray = _to_gray(image)
        found, corners = cv2.findChessboardCorners(gray, pattern_size, None, _FIND_FLAGS)
        if found and self.refine_corners:
            corners = cv2.cornerSubPix(gray, corners, (11, 11), (-1, -1), _SUBPIX_CRITERIA)
        return bool(found), corners

    def draw_chessboard_corners(
        self,
        image: np.ndarray,
        pattern_size: Size,
        corners: Optional[np.ndarray],
        found: bool,
    ) -> np.ndarray:
        annotated = image.copy()
        if corners is not None:
            cv2.drawChessboardCorners(annotated, pattern_size, corners, found)
        return annotated

    def calibrate_camera(
        self,
        object_points: Sequence[np.ndarray],
        image_points: Sequence[np.ndarray],
        image_size: Size,
    ) -> tuple[float, np.ndarray, np.ndarray, Sequence[np.ndarray], Sequence[np.ndarray]]:
        rms, camera_matrix, dist_coeffs, rvecs, tvecs = cv2.calibrateCamera(
            list(object_points), list(image_points), image_size, None, None
        )
        return float(rms), camera_matrix, dist_coeffs, rvecs, tvecs

    def optimal_new_camera_matrix(
        self, camera_matrix: np.ndarray, dist_coeffs: np.ndarray, image_size: Size
    ) -> np.ndarray:
        new_camera_matrix, _roi = cv2.getOptimalNewCameraMatrix(
            camera_matrix, dist_coeffs, image_size, 1, image_size
        )
        return new_camera_matrix

    def init_undistort_rectify_map(
        self,
        camera_matrix: np.ndarray,
        dist_coeffs: np.ndarray,
        new_camera_matrix: np.ndarray,
        image_size: Size,
    ) -> tuple[np.ndarray, np.ndarray]:
        return cv2.initUndistortRectifyMap(
            camera_matrix,
            dist_coeffs,
            None,
            new_camera_matrix,
            image_size,
            cv2.CV_16SC2,
        )

    def remap(
        self, image: np.ndarray, map1: np.ndarray, map2: np.ndarray
    ) -> np.ndarray:
        return cv2.remap(image, map1, map2, cv2.INTER_LINEAR)

    def undistort(
        self,
        image: np.ndarray,
        camera_matrix: np.ndarray,
        dist_coeffs: np.ndarray,
        new_camera_matrix: np.ndarray,
    ) -> np.ndarray:
        return cv2.undistort(image, camera_matrix, dist_coeffs, None, new_camera_matrix)
