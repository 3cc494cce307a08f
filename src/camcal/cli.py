# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
import argparse
import logging
from typing import Optional, Sequence

from camcal import __version__
from camcal.config import config
from camcal.core.camera import Camera
from camcal.core.errors import CameraError
from camcal.logging_config import configure_logging
from camcal.metrics import CameraMetrics, configure_metrics
from camcal.typing import CorrectionType

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; defaults come from the environment config."""
    parser = argparse.ArgumentParser(
        description="Calibrate a camera with a checkerboard and preview corrected frames"
    )
    parser.add_argument(
        "--camera-index",
        type=int,
        default=config.CAMERA_INDEX,
        help=f"Capture device index (default: {config.CAMERA_INDEX})",
    )
    parser.add_argument(
        "--calibration-file",
        type=str,
        default=config.CALIBRATION_FILE,
        help=f"Calibration results file (default: {config.CALIBRATION_FILE})",
    )
    parser.add_argument(
        "--calibrate",
        action="store_true",
        help="Run an interactive calibration before the preview loop",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=config.CHESSBOARD_WIDTH,
        help="Inner corners along the board width",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=config.CHESSBOARD_HEIGHT,
        help="Inner corners along the board height",
    )
    parser.add_argument(
        "--square-size",
        type=float,
        default=config.CHESSBOARD_SQUARE_SIZE,
        help="Side of a single board square in meters",
    )
    parser.add_argument(
        "--images",
        type=int,
        default=config.CALIBRATION_IMAGES,
        help="Number of views to capture before solving",
    )
    parser.add_argument(
        "--correction",
        choices=[c.value for c in CorrectionType],
        default=config.CORRECTION_TYPE,
        help="Distortion correction algorithm (default: %(default)s)",
    )
    args = parser.parse_args(argv)
    # argparse does not check defaults against choices
    if args.correction not in {c.value for c in CorrectionType}:
        parser.error(f"invalid CORRECTION_TYPE: {args.correction!r}")
    return args


def build_camera(args: argparse.Namespace) -> Camera:
    camera = Camera()
    camera.camera_id = args.camera_index
    camera.calibration_file_name = args.calibration_file
    camera.set_chessboard_dimensions(args.width, args.height)
    camera.chessboard_square_dimension = args.square_size
    camera.number_of_images_to_calibrate = args.images
    return camera


def _log_fault(err: CameraError, camera_metrics: CameraMetrics) -> None:
    logger.warning(err.message, extra={"kind": err.kind.value})
    camera_metrics.faults.add(1, {"kind": err.kind.value})


def run_preview_loop(
    camera: Camera,
    correction_type: CorrectionType,
    camera_metrics: CameraMetrics,
    max_iterations: Optional[int] = None,
) -> int:
    """Read, correct and show frames until the cancel key is pressed.

    Faults are logged and the loop moves on to the next frame.

    Returns:
        Number of iterations run.
    """
    iterations = 0
    while max_iterations is None or iterations < max_iterations:
        iterations += 1
        try:
            camera.read()
            camera_metrics.frames_read.add(1)
            camera.show_frame_raw()
            camera.compensate_distortions(correction_type)
            camera_metrics.frames_corrected.add(1, {"correction": correction_type.value})
            camera.show_frame_compensated()
        except CameraError as err:
            _log_fault(err, camera_metrics)
        if camera.poll_key() == config.CANCEL_KEY:
            logger.info("Preview stopped")
            break
    return iterations


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the camcal CLI."""
    args = parse_arguments(argv)
    configure_logging(service_name="camcal", service_version=__version__)
    camera_metrics = CameraMetrics.create(
        configure_metrics(service_name="camcal", service_version=__version__)
    )
    correction_type = CorrectionType(args.correction)

    with build_camera(args) as camera:
        if args.calibrate:
            try:
                camera.calibrate()
            except CameraError as err:
                _log_fault(err, camera_metrics)

        if not camera.calibrated:
            try:
                camera.load_calibration_data()
            except CameraError as err:
                _log_fault(err, camera_metrics)

        try:
            run_preview_loop(camera, correction_type, camera_metrics)
        except KeyboardInterrupt:
            logger.info("Interrupted, releasing camera")


if __name__ == "__main__":
    main()
