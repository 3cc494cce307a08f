# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
import os
from typing import Optional


class Config:
    """Application configuration."""

    # Camera settings
    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))

    # Calibration results file
    CALIBRATION_FILE: str = os.getenv("CALIBRATION_FILE", "cam_calib.txt")

    # Checkerboard pattern (inner corners per row / column, square side in meters)
    CHESSBOARD_WIDTH: int = int(os.getenv("CHESSBOARD_WIDTH", "6"))
    CHESSBOARD_HEIGHT: int = int(os.getenv("CHESSBOARD_HEIGHT", "9"))
    CHESSBOARD_SQUARE_SIZE: float = float(os.getenv("CHESSBOARD_SQUARE_SIZE", "0.0268"))
    CALIBRATION_IMAGES: int = int(
        os.getenv("CALIBRATION_IMAGES", "15")
    )  # views needed before solving

    # Correction applied in the preview loop: "remap" or "undistort"
    CORRECTION_TYPE: str = os.getenv("CORRECTION_TYPE", "undistort").lower()

    # Interactive preview
    KEY_POLL_MS: int = int(os.getenv("KEY_POLL_MS", "10"))
    CAPTURE_KEY: int = int(os.getenv("CAPTURE_KEY", str(ord(" "))))
    CANCEL_KEY: int = int(os.getenv("CANCEL_KEY", "27"))  # Esc

    # Sub-pixel corner refinement after detection
    REFINE_CORNERS: bool = os.getenv("REFINE_CORNERS", "true").lower() in (
        "1",
        "true",
        "yes",
    )

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a configuration value."""
        return os.getenv(key, default)


config = Config()
