# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from pathlib import Path

import numpy as np
import pytest

from camcal.core.errors import CameraError, CameraErrorKind
from camcal.core.storage import (
    format_calibration,
    load_calibration,
    parse_calibration,
    save_calibration,
)
from camcal.typing import CalibrationResult
from tests.dummies import KNOWN_CAMERA_MATRIX, KNOWN_DIST_COEFFS


def test_format_writes_dimensions_then_row_major_values() -> None:
    result = CalibrationResult(KNOWN_CAMERA_MATRIX, KNOWN_DIST_COEFFS)

    lines = format_calibration(result).splitlines()

    assert lines[:2] == ["3", "3"]
    assert [float(v) for v in lines[2:11]] == KNOWN_CAMERA_MATRIX.ravel().tolist()
    assert lines[11:13] == ["8", "1"]
    assert len(lines) == 2 + 9 + 2 + 8


def test_save_then_load_reproduces_values(tmp_path: Path) -> None:
    path = tmp_path / "calib.txt"
    camera_matrix = np.array(
        [[612.123456789, 0.0, 321.987654321], [0.0, 610.5, 243.25], [0.0, 0.0, 1.0]]
    )
    dist = np.array([-0.281234, 0.0912, 1.2e-4, -3.4e-5, -0.01234, 0.0, 0.0, 0.0])

    save_calibration(path, CalibrationResult(camera_matrix, dist))
    loaded = load_calibration(path)

    np.testing.assert_allclose(loaded.camera_matrix, camera_matrix)
    np.testing.assert_allclose(loaded.dist_coeffs.ravel(), dist)
    assert loaded.reprojection_error is None


def test_parse_accepts_short_precision_row_vector() -> None:
    """Files written with six significant digits and a 1x5 distortion row load fine."""
    text = "\n".join(
        ["3", "3", "512", "0", "319.5", "0", "511", "239.5", "0", "0", "1"]
        + ["1", "5", "0.11", "-0.052", "0.001", "-0.002", "0.013"]
    )

    result = parse_calibration(text)

    np.testing.assert_allclose(result.camera_matrix, KNOWN_CAMERA_MATRIX)
    assert result.dist_coeffs.shape == (8, 1)
    np.testing.assert_allclose(result.dist_coeffs[:5, 0], KNOWN_DIST_COEFFS.ravel())


@pytest.mark.parametrize(
    "text",
    [
        "",
        "3\n3\n1\n0\n0\n",
        "3\n3\n1\n0\n0\n0\n1\n0\n0\n0\n1\n",
        "3\n3\n1\n0\n0\n0\nfoo\n0\n0\n0\n1\n1\n1\n0\n",
        "2\n2\n1\n0\n0\n1\n1\n1\n0\n",
        "3\n3\n1\n0\n0\n0\n1\n0\n0\n0\n1\n1\n14\n" + "0\n" * 14,
        "-3\n3\n",
    ],
    ids=[
        "empty",
        "truncated_matrix",
        "missing_distortion",
        "non_numeric",
        "matrix_not_3x3",
        "too_many_coefficients",
        "negative_dimension",
    ],
)
def test_parse_rejects_malformed_data(text: str) -> None:
    with pytest.raises(CameraError) as exc_info:
        parse_calibration(text)
    assert exc_info.value.kind is CameraErrorKind.CALIBRATION_FILE_READ_FAILURE


@pytest.mark.parametrize("name", [" ", ""], ids=["space", "empty"])
def test_blank_file_name_is_rejected(name: str) -> None:
    with pytest.raises(CameraError) as exc_info:
        load_calibration(name)
    assert exc_info.value.kind is CameraErrorKind.EMPTY_CALIBRATION_FILE_NAME

    with pytest.raises(CameraError) as exc_info:
        save_calibration(name, CalibrationResult.default())
    assert exc_info.value.kind is CameraErrorKind.EMPTY_CALIBRATION_FILE_NAME


def test_load_missing_file_raises_wrong_file_name(tmp_path: Path) -> None:
    with pytest.raises(CameraError) as exc_info:
        load_calibration(tmp_path / "missing.txt")
    assert exc_info.value.kind is CameraErrorKind.WRONG_CALIBRATION_FILE_NAME


def test_save_into_directory_raises_wrong_file_name(tmp_path: Path) -> None:
    with pytest.raises(CameraError) as exc_info:
        save_calibration(tmp_path, CalibrationResult.default())
    assert exc_info.value.kind is CameraErrorKind.WRONG_CALIBRATION_FILE_NAME


def test_load_undecodable_file_raises_read_failure(tmp_path: Path) -> None:
    path = tmp_path / "binary.txt"
    path.write_bytes(b"\xff\xfe\x00\x03")

    with pytest.raises(CameraError) as exc_info:
        load_calibration(path)
    assert exc_info.value.kind is CameraErrorKind.CALIBRATION_FILE_READ_FAILURE
