# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from pathlib import Path

import pytest

from camcal.core.camera import Camera
from tests.dummies import DummyCaptureDevice, DummyPreview, DummyVision


@pytest.fixture
def device() -> DummyCaptureDevice:
    return DummyCaptureDevice()


@pytest.fixture
def vision() -> DummyVision:
    return DummyVision()


@pytest.fixture
def preview() -> DummyPreview:
    return DummyPreview()


@pytest.fixture
def camera(device, vision, preview) -> Camera:
    """Camera wired to dummy collaborators, no device id configured."""
    return Camera(device=device, vision=vision, preview=preview)


@pytest.fixture
def configured_camera(camera: Camera, tmp_path: Path) -> Camera:
    """Camera ready to calibrate: id, 6x9 board, two target views, temp results file."""
    camera.camera_id = 0
    camera.set_chessboard_dimensions(6, 9)
    camera.chessboard_square_dimension = 0.0268
    camera.number_of_images_to_calibrate = 2
    camera.calibration_file_name = str(tmp_path / "cam_calib.txt")
    return camera
