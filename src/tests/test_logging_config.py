# SPDX-FileCopyrightText: 2025 robot-visual-perception
#
# SPDX-License-Identifier: MIT
import json
import logging

import camcal.logging_config as logging_config
from camcal.logging_config import JsonFormatter, PrettyFormatter, build_formatter
from camcal.typing import CalibrationState


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "camcal.core.camera", logging.INFO, __file__, 10, "Calibration finished", (), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extras() -> None:
    formatter = JsonFormatter("camcal", "test")

    payload = json.loads(
        formatter.format(
            _record(camera_id=0, pattern=(6, 9), state=CalibrationState.CALIBRATED)
        )
    )

    assert payload["message"] == "Calibration finished"
    assert payload["level"] == "INFO"
    assert payload["service"] == "camcal"
    assert payload["environment"] == "test"
    assert payload["camera_id"] == 0
    assert payload["pattern"] == [6, 9]
    assert payload["state"] == "CalibrationState.CALIBRATED"
    assert "lineno" not in payload


def test_pretty_formatter_single_line() -> None:
    line = PrettyFormatter("camcal", "test").format(_record(kind="empty_frame"))

    assert "\n" not in line
    assert "[camcal.core.camera] Calibration finished" in line
    assert "kind=empty_frame" in line
    assert "env=test" in line


def test_build_formatter_selects_format() -> None:
    assert isinstance(build_formatter("camcal", "dev", "pretty"), PrettyFormatter)
    assert isinstance(build_formatter("camcal", "dev", "json"), JsonFormatter)


def test_configure_logging_defaults_to_json(monkeypatch) -> None:
    monkeypatch.setattr(logging_config, "_configured", False)
    monkeypatch.setattr(logging_config._logs, "set_logger_provider", lambda provider: None)
    for name in (
        "LOG_FORMAT",
        "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level

    try:
        logging_config.configure_logging(service_name="camcal", environment="test")
        console = [h for h in root.handlers if type(h) is logging.StreamHandler]
        assert len(console) == 1
        assert isinstance(console[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
