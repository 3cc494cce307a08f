# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from enum import Enum


class CameraErrorKind(Enum):
    """Closed set of failure causes reported by the camera controller."""

    CAMERA_WRONG_ID = "camera_wrong_id"
    CAMERA_READING_FAILURE = "camera_reading_failure"
    NO_CALIBRATION_DATA = "no_calibration_data"
    NO_CAPTURED_FRAME = "no_captured_frame"
    NO_CALIBRATION_IMAGES = "no_calibration_images"
    WRONG_CHESSBOARD_DIMENSIONS = "wrong_chessboard_dimensions"
    WRONG_CHESSBOARD_SQUARE_DIMENSION = "wrong_chessboard_square_dimension"
    EMPTY_CALIBRATION_FILE_NAME = "empty_calibration_file_name"
    WRONG_CALIBRATION_FILE_NAME = "wrong_calibration_file_name"
    CALIBRATION_FILE_READ_FAILURE = "calibration_file_read_failure"
    EMPTY_FRAME = "empty_frame"


class CameraError(Exception):
    """Fault raised by camera, calibration and persistence operations."""

    def __init__(self, kind: CameraErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"
