#!/usr/bin/env python3
"""Analyze telemetry data from a flight recording.

Usage:
    python scripts/analyze_telemetry.py /tmp/fpvdrone_telemetry_YYYYMMDD_HHMMSS.db
    python scripts/analyze_telemetry.py flight.db --csv flight.csv
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fpvdrone.telemetry import TelemetryAnalyzer


def main() -> int:
    parser = argparse.ArgumentParser(description="Summarize an fpvdrone telemetry recording")
    parser.add_argument("db_path", help="Telemetry SQLite database")
    parser.add_argument("--csv", help="Also export all rows to this CSV file")
    args = parser.parse_args()

    if not Path(args.db_path).exists():
        print(f"Error: Database not found: {args.db_path}")
        return 1

    print(f"Analyzing telemetry from: {args.db_path}")
    print("=" * 80)

    analyzer = TelemetryAnalyzer(args.db_path)
    try:
        print("\n📋 FLIGHT SUMMARY")
        print("-" * 80)
        summary = analyzer.get_summary()
        print(f"Total frames: {summary['frame_count']}")
        if summary.get("sim_seconds"):
            print(f"Flight time: {summary['sim_seconds']:.1f} seconds")
        if summary.get("max_speed_mps") is not None:
            print(
                f"Max speed: {summary['max_speed_mps']:.1f} m/s "
                f"(avg {summary['avg_speed_mps']:.1f} m/s)"
            )
        if summary.get("max_altitude_m") is not None:
            print(f"Max altitude: {summary['max_altitude_m']:.1f} meters")
        if summary.get("avg_thrust") is not None:
            print(f"Avg throttle: {summary['avg_thrust'] * 100:.0f}%")

        print("\n🎮 TIME PER MODE")
        print("-" * 80)
        for mode, seconds in analyzer.get_mode_durations().items():
            print(f"{mode:<6} {seconds:>8.1f} s")

        print("\n💥 CRASHES")
        print("-" * 80)
        crashes = analyzer.get_crashes()
        if not crashes:
            print("✅ No crashes")
        else:
            print("Frame    │ Time (s) │ Position                      │ Speed (m/s)")
            print("─" * 70)
            for crash in crashes:
                position = (
                    f"({crash['position_x']:.1f}, {crash['position_y']:.1f}, "
                    f"{crash['position_z']:.1f})"
                )
                print(
                    f"{crash['frame_count']:>8d} │ {crash['timestamp_ms'] / 1000:>8.1f} │ "
                    f"{position:<29} │ {crash['speed_mps']:>6.1f}"
                )

        if args.csv:
            rows = analyzer.export_to_csv(args.csv)
            print(f"\nExported {rows} rows to {args.csv}")
    finally:
        analyzer.close()

    print("\n" + "=" * 80)
    print("✅ Analysis complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
