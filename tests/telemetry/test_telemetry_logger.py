"""Tests for SQLite telemetry recording."""

import sqlite3
from pathlib import Path
from typing import Any

import pytest

from fpvdrone.physics.flight_model.base import ControlInput, FlightMode, VehicleState
from fpvdrone.physics.vectors import Vector3
from fpvdrone.telemetry import TelemetryAnalyzer, TelemetryLogger


@pytest.fixture
def telemetry(tmp_path: Path) -> TelemetryLogger:
    """Create logger writing to a temp database."""
    return TelemetryLogger(tmp_path / "telemetry.db", buffer_size=3)


def make_state(altitude: float, speed: float) -> VehicleState:
    return VehicleState(
        position=Vector3(0.0, altitude, 0.0),
        linear_velocity=Vector3(0.0, 0.0, -speed),
        mode=FlightMode.LEVEL,
    )


def fetch(db_path: str, sql: str) -> list[tuple[Any, ...]]:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


class TestTelemetryLogger:
    """Test TelemetryLogger."""

    def test_schema_created(self, telemetry: TelemetryLogger) -> None:
        """Test tables and session metadata exist on creation."""
        tables = {row[0] for row in fetch(telemetry.db_path, "SELECT name FROM sqlite_master")}
        assert {"telemetry", "metadata"} <= tables
        assert fetch(telemetry.db_path, "SELECT key FROM metadata") == [("session_start",)]

    def test_buffered_until_full(self, telemetry: TelemetryLogger) -> None:
        """Test frames are written only once the buffer fills."""
        for _ in range(2):
            telemetry.log(0.016, make_state(2.0, 1.0), ControlInput())
        assert fetch(telemetry.db_path, "SELECT COUNT(*) FROM telemetry") == [(0,)]

        telemetry.log(0.016, make_state(2.0, 1.0), ControlInput())
        assert fetch(telemetry.db_path, "SELECT COUNT(*) FROM telemetry") == [(3,)]

    def test_close_flushes(self, telemetry: TelemetryLogger) -> None:
        """Test closing writes any buffered frames."""
        telemetry.log(0.016, make_state(2.0, 1.0), ControlInput())
        telemetry.close()
        assert fetch(telemetry.db_path, "SELECT COUNT(*) FROM telemetry") == [(1,)]
        assert telemetry.get_frame_count() == 1

    def test_row_contents(self, telemetry: TelemetryLogger) -> None:
        """Test one frame's state, input and crash count are stored."""
        telemetry.log(0.02, make_state(12.5, 4.0), ControlInput(thrust=0.6, roll=-0.5), 2)
        telemetry.flush()

        row = fetch(
            telemetry.db_path,
            "SELECT frame_count, dt, position_y, speed_mps, mode, thrust, roll_input, crash_count "
            "FROM telemetry",
        )[0]
        assert row == (1, 0.02, 12.5, pytest.approx(4.0), "LEVEL", 0.6, -0.5, 2)

    def test_summary(self, telemetry: TelemetryLogger) -> None:
        """Test summary statistics over recorded frames."""
        telemetry.log(0.016, make_state(2.0, 3.0), ControlInput())
        telemetry.log(0.016, make_state(8.0, 1.0), ControlInput(), 1)
        telemetry.close()

        summary = telemetry.get_summary()

        assert summary["frame_count"] == 2
        assert summary["max_altitude_m"] == 8.0
        assert summary["max_speed_mps"] == pytest.approx(3.0)
        assert summary["crashes"] == 1
        assert summary["duration_seconds"] >= 0.0

    def test_invalid_buffer_size(self, tmp_path: Path) -> None:
        """Test a zero buffer size is rejected."""
        with pytest.raises(ValueError, match="buffer_size must be > 0"):
            TelemetryLogger(tmp_path / "t.db", buffer_size=0)


class TestTelemetryAnalyzer:
    """Test TelemetryAnalyzer."""

    @pytest.fixture
    def recording(self, tmp_path: Path) -> Path:
        """Record a short flight with two crashes."""
        db_path = tmp_path / "flight.db"
        recorder = TelemetryLogger(db_path)
        crashes = [0, 0, 1, 1, 1, 2]
        for i, crash_count in enumerate(crashes):
            state = make_state(2.0 + i, float(i))
            if i >= 4:
                state = VehicleState(position=state.position, mode=FlightMode.ACRO)
            recorder.log(0.5, state, ControlInput(thrust=0.5), crash_count)
        recorder.close()
        return db_path

    def test_missing_database(self, tmp_path: Path) -> None:
        """Test opening a missing database raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            TelemetryAnalyzer(tmp_path / "nope.db")

    def test_crashes(self, recording: Path) -> None:
        """Test crashes are reported at the frame the count rose."""
        analyzer = TelemetryAnalyzer(recording)
        crashes = analyzer.get_crashes()
        analyzer.close()

        assert [c["frame_count"] for c in crashes] == [3, 6]
        assert crashes[0]["position_y"] == 4.0

    def test_mode_durations(self, recording: Path) -> None:
        """Test simulated seconds spent in each mode."""
        analyzer = TelemetryAnalyzer(recording)
        durations = analyzer.get_mode_durations()
        analyzer.close()

        assert durations == {"ACRO": pytest.approx(1.0), "LEVEL": pytest.approx(2.0)}

    def test_summary(self, recording: Path) -> None:
        """Test flight summary statistics."""
        analyzer = TelemetryAnalyzer(recording)
        summary = analyzer.get_summary()
        analyzer.close()

        assert summary["frame_count"] == 6
        assert summary["sim_seconds"] == pytest.approx(3.0)
        assert summary["max_altitude_m"] == 7.0
        assert summary["crashes"] == 2

    def test_export_to_csv(self, recording: Path, tmp_path: Path) -> None:
        """Test exporting selected columns to CSV."""
        csv_path = tmp_path / "flight.csv"
        analyzer = TelemetryAnalyzer(recording)
        rows = analyzer.export_to_csv(csv_path, ["frame_count", "mode"])
        analyzer.close()

        assert rows == 6
        lines = csv_path.read_text().splitlines()
        assert lines[0] == "frame_count,mode"
        assert lines[1] == "1,LEVEL"

    def test_export_unknown_column(self, recording: Path, tmp_path: Path) -> None:
        """Test exporting an unknown column is rejected."""
        analyzer = TelemetryAnalyzer(recording)
        with pytest.raises(ValueError, match="Unknown telemetry columns: altitude"):
            analyzer.export_to_csv(tmp_path / "x.csv", ["altitude"])
        analyzer.close()
