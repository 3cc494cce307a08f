# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
"""Plain-text persistence for calibration results.

Layout, one token per line: camera matrix rows, columns, then its values in
row-major order, followed by the same block for the distortion coefficients.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Union

import numpy as np

from camcal.core.errors import CameraError, CameraErrorKind
from camcal.typing import CalibrationResult, DIST_COEFFS_COUNT

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _check_file_name(path: PathLike) -> str:
    name = os.fspath(path)
    if not name.strip():
        raise CameraError(
            CameraErrorKind.EMPTY_CALIBRATION_FILE_NAME,
            f"Calibration file name cannot be {name!r}",
        )
    return name


def _matrix_lines(matrix: np.ndarray) -> list[str]:
    rows, columns = matrix.shape
    lines = [str(rows), str(columns)]
    lines.extend(repr(float(value)) for value in matrix.ravel(order="C"))
    return lines


def format_calibration(result: CalibrationResult) -> str:
    """Serialize a calibration result to the line-oriented text format."""
    lines = _matrix_lines(result.camera_matrix) + _matrix_lines(result.dist_coeffs)
    return "\n".join(lines) + "\n"


def _read_matrix(tokens: Iterator[str], what: str) -> np.ndarray:
    try:
        rows = int(next(tokens))
        columns = int(next(tokens))
        if rows < 0 or columns < 0:
            raise ValueError(f"negative shape {rows}x{columns}")
        values = [float(next(tokens)) for _ in range(rows * columns)]
    except StopIteration:
        raise CameraError(
            CameraErrorKind.CALIBRATION_FILE_READ_FAILURE,
            f"Unexpected end of file while reading {what}",
        ) from None
    except ValueError as err:
        raise CameraError(
            CameraErrorKind.CALIBRATION_FILE_READ_FAILURE,
            f"Invalid {what} data: {err}",
        ) from err
    return np.array(values, dtype=np.float64).reshape(rows, columns)


def parse_calibration(text: str) -> CalibrationResult:
    """Parse the text format produced by format_calibration.

    Raises:
        CameraError: CALIBRATION_FILE_READ_FAILURE on truncated or malformed data.
    """
    tokens = iter(text.split())
    camera_matrix = _read_matrix(tokens, "camera matrix")
    dist_coeffs = _read_matrix(tokens, "distortion coefficients")

    if camera_matrix.shape != (3, 3):
        raise CameraError(
            CameraErrorKind.CALIBRATION_FILE_READ_FAILURE,
            f"Camera matrix must be 3x3, got {camera_matrix.shape[0]}x{camera_matrix.shape[1]}",
        )
    if dist_coeffs.size > DIST_COEFFS_COUNT:
        raise CameraError(
            CameraErrorKind.CALIBRATION_FILE_READ_FAILURE,
            f"Expected at most {DIST_COEFFS_COUNT} distortion coefficients, got {dist_coeffs.size}",
        )
    return CalibrationResult(camera_matrix, dist_coeffs)


def save_calibration(path: PathLike, result: CalibrationResult) -> Path:
    """Write result to path.

    Raises:
        CameraError: EMPTY_CALIBRATION_FILE_NAME for a blank name,
            WRONG_CALIBRATION_FILE_NAME when the file cannot be written.
    """
    name = _check_file_name(path)
    target = Path(name)
    try:
        target.write_text(format_calibration(result), encoding="utf-8")
    except OSError as err:
        raise CameraError(
            CameraErrorKind.WRONG_CALIBRATION_FILE_NAME,
            f"Cannot write calibration file {name}: {err}",
        ) from err
    logger.info("Calibration saved", extra={"path": str(target)})
    return target


def load_calibration(path: PathLike) -> CalibrationResult:
    """Read a calibration result from path.

    Raises:
        CameraError: EMPTY_CALIBRATION_FILE_NAME for a blank name,
            WRONG_CALIBRATION_FILE_NAME when the file cannot be opened,
            CALIBRATION_FILE_READ_FAILURE when its contents are malformed.
    """
    name = _check_file_name(path)
    try:
        text = Path(name).read_text(encoding="utf-8")
    except OSError as err:
        raise CameraError(
            CameraErrorKind.WRONG_CALIBRATION_FILE_NAME,
            f"Exception opening the file named: {name}",
        ) from err
    except UnicodeDecodeError as err:
        raise CameraError(
            CameraErrorKind.CALIBRATION_FILE_READ_FAILURE,
            f"Calibration file {name} is not valid text",
        ) from err
    result = parse_calibration(text)
    logger.info("Calibration loaded", extra={"path": name})
    return result
