"""Telemetry system for flight data recording and analysis."""

from fpvdrone.telemetry.telemetry_logger import TelemetryAnalyzer, TelemetryLogger

__all__ = ["TelemetryAnalyzer", "TelemetryLogger"]
