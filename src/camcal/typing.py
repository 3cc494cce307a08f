# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

# Distortion coefficients are always stored as a column of this many values.
DIST_COEFFS_COUNT = 8


class CorrectionType(Enum):
    """Algorithm used to compensate lens distortion."""

    REMAP = "remap"
    UNDISTORT = "undistort"


class CalibrationState(Enum):
    """Lifecycle of a calibration session."""

    IDLE = "idle"
    CAPTURING = "capturing"
    SOLVING = "solving"
    CALIBRATED = "calibrated"


def normalize_dist_coeffs(dist_coeffs: np.ndarray) -> np.ndarray:
    """Return distortion coefficients as a float64 column of DIST_COEFFS_COUNT values.

    Shorter vectors are zero-padded. Longer vectors raise ValueError.
    """
    flat = np.asarray(dist_coeffs, dtype=np.float64).ravel()
    if flat.size > DIST_COEFFS_COUNT:
        raise ValueError(
            f"Expected at most {DIST_COEFFS_COUNT} distortion coefficients, got {flat.size}"
        )
    column = np.zeros((DIST_COEFFS_COUNT, 1), dtype=np.float64)
    column[: flat.size, 0] = flat
    return column


@dataclass
class CalibrationResult:
    """Intrinsic camera parameters."""

    camera_matrix: np.ndarray
    dist_coeffs: np.ndarray
    reprojection_error: Optional[float] = field(default=None, kw_only=True)
    """RMS reprojection error reported by the solver; None when loaded from file."""

    def __post_init__(self) -> None:
        self.camera_matrix = np.asarray(self.camera_matrix, dtype=np.float64)
        if self.camera_matrix.shape != (3, 3):
            raise ValueError(
                f"Camera matrix must be 3x3, got {self.camera_matrix.shape}"
            )
        self.dist_coeffs = normalize_dist_coeffs(self.dist_coeffs)

    @classmethod
    def default(cls) -> "CalibrationResult":
        """Identity camera matrix and zero distortion."""
        return cls(
            np.eye(3, dtype=np.float64),
            np.zeros((DIST_COEFFS_COUNT, 1), dtype=np.float64),
        )
