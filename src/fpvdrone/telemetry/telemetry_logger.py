"""SQLite telemetry recorder for drone flights.

Each simulated frame becomes one row: timing, position, attitude, velocity,
body rates, control inputs, active mode and crash count. Rows are buffered
and written in batches so recording stays out of the frame budget.
"""

import csv
import math
import sqlite3
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from fpvdrone.core.logging_system import get_logger
from fpvdrone.physics.flight_model.base import ControlInput, VehicleState

logger = get_logger(__name__)

_COLUMNS = (
    "timestamp_ms",
    "timestamp_real",
    "frame_count",
    "dt",
    "position_x",
    "position_y",
    "position_z",
    "pitch_deg",
    "yaw_deg",
    "roll_deg",
    "velocity_x",
    "velocity_y",
    "velocity_z",
    "speed_mps",
    "pitch_rate",
    "yaw_rate",
    "roll_rate",
    "mode",
    "thrust",
    "yaw_input",
    "pitch_input",
    "roll_input",
    "crash_count",
)


class TelemetryLogger:
    """Records drone telemetry to an SQLite database.

    Data is buffered and written in batches for performance.
    """

    def __init__(self, db_path: str | Path | None = None, buffer_size: int = 100):
        """Initialize telemetry logger.

        Args:
            db_path: Path to SQLite database file. If None, creates a
                timestamped file in the system temp directory.
            buffer_size: Number of records to buffer before writing to disk.

        Raises:
            ValueError: If ``buffer_size`` is not positive.
        """
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be > 0, got {buffer_size}")

        if db_path is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            db_path = Path(tempfile.gettempdir()) / f"fpvdrone_telemetry_{timestamp}.db"

        self.db_path = str(db_path)
        self.buffer_size = buffer_size
        self.buffer: list[tuple[Any, ...]] = []
        self.start_time = time.time()
        self.frame_count = 0

        self._init_database()

        logger.info(f"TelemetryLogger initialized: {self.db_path}")

    def _init_database(self) -> None:
        """Create database schema for telemetry data."""
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS telemetry (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,

                    -- Timing
                    timestamp_ms INTEGER NOT NULL,  -- Milliseconds since start
                    timestamp_real REAL NOT NULL,   -- Unix timestamp
                    frame_count INTEGER NOT NULL,
                    dt REAL,

                    -- Position and attitude (YXZ Euler)
                    position_x REAL,
                    position_y REAL,
                    position_z REAL,
                    pitch_deg REAL,
                    yaw_deg REAL,
                    roll_deg REAL,

                    -- Velocity and body rates
                    velocity_x REAL,
                    velocity_y REAL,
                    velocity_z REAL,
                    speed_mps REAL,
                    pitch_rate REAL,
                    yaw_rate REAL,
                    roll_rate REAL,

                    -- Control
                    mode TEXT,
                    thrust REAL,
                    yaw_input REAL,
                    pitch_input REAL,
                    roll_input REAL,

                    crash_count INTEGER
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_timestamp
                ON telemetry(timestamp_ms)
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)
            cursor.execute(
                "INSERT OR REPLACE INTO metadata (key, value) VALUES ('session_start', ?)",
                (datetime.now().isoformat(),),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Telemetry database schema created")

    def log(
        self, dt: float, state: VehicleState, inputs: ControlInput, crash_count: int = 0
    ) -> None:
        """Record one frame.

        Args:
            dt: Frame time (s).
            state: State after the frame's update.
            inputs: Command applied this frame.
            crash_count: Crashes so far.
        """
        self.frame_count += 1
        current_time = time.time()
        elapsed_ms = int((current_time - self.start_time) * 1000)

        pitch, yaw, roll = state.get_attitude()
        p = state.position
        v = state.linear_velocity
        w = state.angular_velocity

        self.buffer.append(
            (
                elapsed_ms,
                current_time,
                self.frame_count,
                dt,
                p.x,
                p.y,
                p.z,
                math.degrees(pitch),
                math.degrees(yaw),
                math.degrees(roll),
                v.x,
                v.y,
                v.z,
                v.magnitude(),
                w.x,
                w.y,
                w.z,
                state.mode.value,
                inputs.thrust,
                inputs.yaw,
                inputs.pitch,
                inputs.roll,
                crash_count,
            )
        )

        if len(self.buffer) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        """Write buffered data to database."""
        if not self.buffer:
            return

        placeholders = ",".join("?" for _ in _COLUMNS)
        conn = sqlite3.connect(self.db_path)
        try:
            conn.executemany(
                f"INSERT INTO telemetry ({','.join(_COLUMNS)}) VALUES ({placeholders})",
                self.buffer,
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug(f"Flushed {len(self.buffer)} telemetry records to database")
        self.buffer.clear()

    def close(self) -> None:
        """Flush remaining data and close logger."""
        self.flush()
        logger.info(f"TelemetryLogger closed: {self.frame_count} frames logged to {self.db_path}")

    def get_frame_count(self) -> int:
        """Number of frames recorded (buffered or written)."""
        return self.frame_count

    def get_summary(self) -> dict[str, Any]:
        """Get summary statistics for the flight.

        Returns:
            Dictionary with frame count, duration, max speed, max altitude and crashes.
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            row = conn.execute("""
                SELECT
                    COUNT(*) as frame_count,
                    MIN(timestamp_ms) as start_ms,
                    MAX(timestamp_ms) as end_ms,
                    MAX(speed_mps) as max_speed_mps,
                    MAX(position_y) as max_altitude_m,
                    MAX(crash_count) as crashes
                FROM telemetry
            """).fetchone()
        finally:
            conn.close()

        summary = dict(row)
        if summary["end_ms"] is not None and summary["start_ms"] is not None:
            summary["duration_seconds"] = (summary["end_ms"] - summary["start_ms"]) / 1000.0
        return summary


class TelemetryAnalyzer:
    """Read-only analysis of a recorded flight.

    Provides convenience methods for common questions: where the drone
    crashed, how long it flew in each mode, overall statistics.
    """

    def __init__(self, db_path: str | Path):
        """Open a telemetry database.

        Args:
            db_path: Path to a database written by ``TelemetryLogger``.

        Raises:
            FileNotFoundError: If the database does not exist.
        """
        if not Path(db_path).is_file():
            raise FileNotFoundError(f"Telemetry database not found: {db_path}")
        self.db_path = str(db_path)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row

    def get_crashes(self) -> list[dict[str, Any]]:
        """Frames on which the crash count went up.

        Returns:
            One dict per crash with frame, time, position and speed.
        """
        cursor = self.conn.execute("""
            SELECT frame_count, timestamp_ms, position_x, position_y, position_z,
                   speed_mps, crash_count
            FROM telemetry
            ORDER BY frame_count
        """)

        crashes = []
        previous = 0
        for row in cursor:
            if row["crash_count"] > previous:
                crashes.append(dict(row))
            previous = row["crash_count"]
        return crashes

    def get_mode_durations(self) -> dict[str, float]:
        """Seconds of simulated time spent in each flight mode."""
        cursor = self.conn.execute("""
            SELECT mode, SUM(dt) as seconds
            FROM telemetry
            GROUP BY mode
            ORDER BY mode
        """)
        return {row["mode"]: row["seconds"] or 0.0 for row in cursor}

    def get_summary(self) -> dict[str, Any]:
        """Get summary statistics for the flight.

        Returns:
            Dictionary containing flight summary statistics
        """
        summary = dict(
            self.conn.execute("""
                SELECT
                    COUNT(*) as frame_count,
                    SUM(dt) as sim_seconds,
                    MAX(speed_mps) as max_speed_mps,
                    AVG(speed_mps) as avg_speed_mps,
                    MAX(position_y) as max_altitude_m,
                    AVG(thrust) as avg_thrust,
                    MAX(crash_count) as crashes
                FROM telemetry
            """).fetchone()
        )
        return summary

    def export_to_csv(self, csv_path: str | Path, columns: list[str] | None = None) -> int:
        """Export telemetry rows to a CSV file.

        Args:
            csv_path: Output CSV file path.
            columns: Columns to export (None = all).

        Returns:
            Number of rows written.

        Raises:
            ValueError: If a requested column does not exist.
        """
        if columns:
            unknown = sorted(set(columns) - set(_COLUMNS))
            if unknown:
                raise ValueError(f"Unknown telemetry columns: {', '.join(unknown)}")
            cursor = self.conn.execute(
                f"SELECT {','.join(columns)} FROM telemetry ORDER BY frame_count"
            )
        else:
            cursor = self.conn.execute("SELECT * FROM telemetry ORDER BY frame_count")

        rows = cursor.fetchall()
        if not rows:
            logger.warning("No data to export")
            return 0

        column_names = [description[0] for description in cursor.description]
        with open(csv_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(column_names)
            writer.writerows(tuple(row) for row in rows)

        logger.info(f"Exported {len(rows)} rows to {csv_path}")
        return len(rows)

    def close(self) -> None:
        """Close database connection."""
        self.conn.close()
