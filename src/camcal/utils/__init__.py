# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from camcal.utils.camera import (
    capture_backends,
    open_camera,
    read_frame,
)

from camcal.utils.image import (
    chessboard_object_points,
    frame_size,
    is_empty,
    put_calibration_info,
)

__all__ = [
    "capture_backends",
    "open_camera",
    "read_frame",
    "chessboard_object_points",
    "frame_size",
    "is_empty",
    "put_calibration_info",
]
