# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Optional

import numpy as np

from camcal.config import config
from camcal.core.contracts import CaptureDevice, PreviewWindow, Size, VisionBackend
from camcal.core.devices import OpenCvCaptureDevice, OpenCvPreviewWindow
from camcal.core.errors import CameraError, CameraErrorKind
from camcal.core.storage import load_calibration, save_calibration
from camcal.core.vision import OpenCvVision
from camcal.typing import CalibrationResult, CalibrationState, CorrectionType
from camcal.utils.image import (
    chessboard_object_points,
    frame_size,
    is_empty,
    put_calibration_info,
)

logger = logging.getLogger(__name__)

DEFAULT_CALIBRATION_FILE = "cam_calib_results.txt"
RAW_WINDOW = "Raw"
COMPENSATED_WINDOW = "Compensated"
UNSET_CAMERA_ID = -1


class Camera:
    """Capture device plus checkerboard calibration state.

    The device, the vision backend and the preview window are collaborators
    injected at construction; they default to the OpenCV implementations.
    """

    def __init__(
        self,
        device: Optional[CaptureDevice] = None,
        vision: Optional[VisionBackend] = None,
        preview: Optional[PreviewWindow] = None,
    ) -> None:
        self._device: CaptureDevice = device or OpenCvCaptureDevice()
        self._vision: VisionBackend = vision or OpenCvVision()
        self._preview: PreviewWindow = preview or OpenCvPreviewWindow()

        self._camera_id = UNSET_CAMERA_ID
        self._chessboard_width = 0
        self._chessboard_height = 0
        self._chessboard_square_dimension = 0.0
        self._number_of_images_to_calibrate = 0
        self._calibration_file_name = DEFAULT_CALIBRATION_FILE

        self._state = CalibrationState.IDLE
        self._calibration_image_number = 0
        self._calibration = CalibrationResult.default()

        self._chessboard_corners: Optional[np.ndarray] = None
        self._frame_raw: Optional[np.ndarray] = None
        self._frame_compensated: Optional[np.ndarray] = None
        self._frame_size: Optional[Size] = None

        # remap table cache, keyed on the frame size it was built for
        self._remap_maps: Optional[tuple[np.ndarray, np.ndarray]] = None
        self._remap_size: Optional[Size] = None
        self._open_windows: set[str] = set()

    # configuration

    @property
    def camera_id(self) -> int:
        return self._camera_id

    @camera_id.setter
    def camera_id(self, value: int) -> None:
        if value != self._camera_id and self._device.is_opened():
            self._device.release()
        self._camera_id = int(value)

    @property
    def chessboard_width(self) -> int:
        """Inner corners along the horizontal edge of the board."""
        return self._chessboard_width

    @chessboard_width.setter
    def chessboard_width(self, value: int) -> None:
        self._chessboard_width = int(value)

    @property
    def chessboard_height(self) -> int:
        """Inner corners along the vertical edge of the board."""
        return self._chessboard_height

    @chessboard_height.setter
    def chessboard_height(self, value: int) -> None:
        self._chessboard_height = int(value)

    @property
    def chessboard_dimensions(self) -> Size:
        """Pattern size as (width, height), the order OpenCV expects."""
        return self._chessboard_width, self._chessboard_height

    def set_chessboard_dimensions(self, width: int, height: int) -> None:
        self.chessboard_width = width
        self.chessboard_height = height

    @property
    def chessboard_square_dimension(self) -> float:
        """Side of a single board square, in meters."""
        return self._chessboard_square_dimension

    @chessboard_square_dimension.setter
    def chessboard_square_dimension(self, value: float) -> None:
        self._chessboard_square_dimension = float(value)

    @property
    def number_of_images_to_calibrate(self) -> int:
        return self._number_of_images_to_calibrate

    @number_of_images_to_calibrate.setter
    def number_of_images_to_calibrate(self, value: int) -> None:
        self._number_of_images_to_calibrate = int(value)

    @property
    def calibration_file_name(self) -> str:
        return self._calibration_file_name

    @calibration_file_name.setter
    def calibration_file_name(self, value: str | Path) -> None:
        self._calibration_file_name = str(value)

    # state

    @property
    def state(self) -> CalibrationState:
        return self._state

    @property
    def calibrated(self) -> bool:
        return self._state is CalibrationState.CALIBRATED

    @calibrated.setter
    def calibrated(self, value: bool) -> None:
        self._state = CalibrationState.CALIBRATED if value else CalibrationState.IDLE

    @property
    def calibration_in_progress(self) -> bool:
        return self._state in (CalibrationState.CAPTURING, CalibrationState.SOLVING)

    @property
    def calibration_image_number(self) -> int:
        """Views stored during the current or last calibration session."""
        return self._calibration_image_number

    @property
    def calibration(self) -> CalibrationResult:
        return self._calibration

    @property
    def camera_matrix(self) -> np.ndarray:
        return self._calibration.camera_matrix

    @property
    def dist_coeffs(self) -> np.ndarray:
        return self._calibration.dist_coeffs

    @property
    def frame_raw(self) -> Optional[np.ndarray]:
        return self._frame_raw

    @property
    def frame_compensated(self) -> Optional[np.ndarray]:
        return self._frame_compensated

    def set_default_calibration(self) -> None:
        """Reset intrinsics to the identity matrix and zero distortion."""
        self._set_calibration(CalibrationResult.default())

    def _set_calibration(self, result: CalibrationResult) -> None:
        self._calibration = result
        self._remap_maps = None
        self._remap_size = None

    # device

    def open(self) -> None:
        """Open the capture device for the configured id.

        Raises:
            CameraError: CAMERA_WRONG_ID if the id is unset or opening fails.
        """
        if self._camera_id == UNSET_CAMERA_ID or not self._device.open(self._camera_id):
            raise CameraError(
                CameraErrorKind.CAMERA_WRONG_ID,
                f"Cannot open camera with id: {self._camera_id}",
            )

    def release(self) -> None:
        """Close the device and any preview windows this camera opened."""
        self._device.release()
        for window_name in sorted(self._open_windows):
            self._preview.close(window_name)
        self._open_windows.clear()

    def __enter__(self) -> "Camera":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.release()

    def _ensure_open(self) -> None:
        if not self._device.is_opened():
            self.open()

    def _grab(self) -> np.ndarray:
        ok, frame = self._device.read()
        if not ok or is_empty(frame):
            raise CameraError(
                CameraErrorKind.CAMERA_READING_FAILURE,
                f"Cannot read frame from camera with id: {self._camera_id}",
            )
        self._frame_raw = frame
        self._frame_size = frame_size(frame)
        return frame

    def read(self) -> np.ndarray:
        """Read the next raw frame, opening the device on first use.

        Raises:
            CameraError: CAMERA_WRONG_ID if the id is unset or the device cannot
                be opened, CAMERA_READING_FAILURE if the read fails.
        """
        if self._camera_id == UNSET_CAMERA_ID:
            raise CameraError(
                CameraErrorKind.CAMERA_WRONG_ID,
                f"Cannot read from camera with id: {self._camera_id}",
            )
        self._ensure_open()
        return self._grab()

    # calibration

    def find_chessboard_corners(self) -> bool:
        """Detect the configured pattern on the current raw frame."""
        if is_empty(self._frame_raw):
            raise CameraError(
                CameraErrorKind.NO_CAPTURED_FRAME,
                "Cannot look for chessboard corners without captured frame",
            )
        found, corners = self._vision.find_chessboard_corners(
            self._frame_raw, self.chessboard_dimensions
        )
        self._chessboard_corners = corners if found else None
        return found

    def _validate_calibration_settings(self) -> None:
        if self._camera_id == UNSET_CAMERA_ID:
            raise CameraError(
                CameraErrorKind.CAMERA_WRONG_ID,
                f"Cannot calibrate camera with id: {self._camera_id}",
            )
        if self._number_of_images_to_calibrate <= 0:
            raise CameraError(
                CameraErrorKind.NO_CALIBRATION_IMAGES,
                "Number of images to calibrate should be greater than 0",
            )
        if self._chessboard_width <= 0 or self._chessboard_height <= 0:
            raise CameraError(
                CameraErrorKind.WRONG_CHESSBOARD_DIMENSIONS,
                f"Cannot calibrate camera with chessboard dimensions {self.chessboard_dimensions}",
            )
        if self._chessboard_square_dimension <= 0.0:
            raise CameraError(
                CameraErrorKind.WRONG_CHESSBOARD_SQUARE_DIMENSION,
                "Cannot calibrate camera when chessboard square size equals 0",
            )

    def calibrate(self) -> Optional[CalibrationResult]:
        """Interactively collect checkerboard views, solve and persist intrinsics.

        Each loop iteration reads a frame, looks for the pattern and shows a
        preview. The capture key stores the view when the pattern is visible;
        the cancel key aborts. Once enough views are stored the intrinsics are
        solved and written to the calibration file.

        Returns:
            The new calibration, or None when the session was cancelled.

        Raises:
            CameraError: on invalid settings, device failures, or when the
                result cannot be saved. Any exception raised mid-session
                returns the state to IDLE first.
        """
        self._validate_calibration_settings()
        self._ensure_open()

        self._state = CalibrationState.CAPTURING
        self._calibration_image_number = 0
        image_points: list[np.ndarray] = []
        logger.info(
            "Calibration started",
            extra={
                "camera_id": self._camera_id,
                "pattern": self.chessboard_dimensions,
                "target_images": self._number_of_images_to_calibrate,
            },
        )

        try:
            while self._calibration_image_number < self._number_of_images_to_calibrate:
                frame = self._grab()
                found = self.find_chessboard_corners()
                preview = (
                    self._vision.draw_chessboard_corners(
                        frame, self.chessboard_dimensions, self._chessboard_corners, found
                    )
                    if found
                    else frame.copy()
                )
                put_calibration_info(
                    preview,
                    self._calibration_image_number,
                    self._number_of_images_to_calibrate,
                )
                self._show(RAW_WINDOW, preview)

                key = self.poll_key()
                if key == config.CANCEL_KEY:
                    logger.info(
                        "Calibration cancelled",
                        extra={"captured": self._calibration_image_number},
                    )
                    self._state = CalibrationState.IDLE
                    return None
                if key == config.CAPTURE_KEY and found:
                    image_points.append(self._chessboard_corners.copy())
                    self._calibration_image_number += 1
                    logger.info(
                        "Calibration view captured",
                        extra={
                            "captured": self._calibration_image_number,
                            "target_images": self._number_of_images_to_calibrate,
                        },
                    )

            self._state = CalibrationState.SOLVING
            result = self._solve(image_points)
            save_calibration(self._calibration_file_name, result)
            self._set_calibration(result)
        except BaseException:
            self._state = CalibrationState.IDLE
            raise

        self._state = CalibrationState.CALIBRATED
        logger.info(
            "Calibration finished",
            extra={"reprojection_error": result.reprojection_error},
        )
        return result

    def _solve(self, image_points: list[np.ndarray]) -> CalibrationResult:
        if not image_points:
            raise CameraError(
                CameraErrorKind.NO_CALIBRATION_IMAGES,
                "Cannot calibrate camera with no calibration images",
            )
        board = chessboard_object_points(
            self.chessboard_dimensions, self._chessboard_square_dimension
        )
        object_points = [board] * len(image_points)
        rms, camera_matrix, dist_coeffs, _rvecs, _tvecs = self._vision.calibrate_camera(
            object_points, image_points, self._frame_size
        )
        return CalibrationResult(camera_matrix, dist_coeffs, reprojection_error=rms)

    # correction

    def compensate_distortions(self, correction_type: CorrectionType) -> np.ndarray:
        """Correct the current raw frame with the loaded intrinsics.

        REMAP builds the remap table once and reuses it until the calibration
        or the frame size changes. UNDISTORT corrects each frame from scratch.

        Raises:
            CameraError: NO_CALIBRATION_DATA before calibration,
                NO_CAPTURED_FRAME before the first successful read.
        """
        if not self.calibrated:
            raise CameraError(
                CameraErrorKind.NO_CALIBRATION_DATA,
                "Cannot compensate image without calibration data",
            )
        if is_empty(self._frame_raw):
            raise CameraError(
                CameraErrorKind.NO_CAPTURED_FRAME,
                "Cannot compensate image without captured frame",
            )

        size = frame_size(self._frame_raw)
        camera_matrix = self._calibration.camera_matrix
        dist_coeffs = self._calibration.dist_coeffs

        if correction_type is CorrectionType.REMAP:
            if self._remap_maps is None or self._remap_size != size:
                new_camera_matrix = self._vision.optimal_new_camera_matrix(
                    camera_matrix, dist_coeffs, size
                )
                self._remap_maps = self._vision.init_undistort_rectify_map(
                    camera_matrix, dist_coeffs, new_camera_matrix, size
                )
                self._remap_size = size
                logger.debug("Remap table built", extra={"frame_size": size})
            map1, map2 = self._remap_maps
            corrected = self._vision.remap(self._frame_raw, map1, map2)
        elif correction_type is CorrectionType.UNDISTORT:
            new_camera_matrix = self._vision.optimal_new_camera_matrix(
                camera_matrix, dist_coeffs, size
            )
            corrected = self._vision.undistort(
                self._frame_raw, camera_matrix, dist_coeffs, new_camera_matrix
            )
        else:
            raise ValueError(f"Unsupported correction type: {correction_type!r}")

        self._frame_compensated = corrected
        return corrected

    # persistence

    def save_calibration_data(self) -> Path:
        """Write the current intrinsics to the calibration file."""
        return save_calibration(self._calibration_file_name, self._calibration)

    def load_calibration_data(self) -> CalibrationResult:
        """Replace the intrinsics with the calibration file contents and mark calibrated."""
        result = load_calibration(self._calibration_file_name)
        self._set_calibration(result)
        self.calibrated = True
        return result

    # preview

    def _show(self, window_name: str, image: np.ndarray) -> None:
        self._preview.show(window_name, image)
        self._open_windows.add(window_name)

    def show_frame_raw(self) -> None:
        if is_empty(self._frame_raw):
            raise CameraError(CameraErrorKind.EMPTY_FRAME, "Cannot show empty frame")
        self._show(RAW_WINDOW, self._frame_raw)

    def show_frame_compensated(self) -> None:
        if is_empty(self._frame_compensated):
            raise CameraError(CameraErrorKind.EMPTY_FRAME, "Cannot show empty frame")
        self._show(COMPENSATED_WINDOW, self._frame_compensated)

    def poll_key(self, delay_ms: Optional[int] = None) -> int:
        """Wait for a key press in the preview window; -1 when none arrived."""
        if delay_ms is None:
            delay_ms = config.KEY_POLL_MS
        return self._preview.wait_key(delay_ms)
