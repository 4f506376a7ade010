"""Drone flight model: value types and the ACRO/LEVEL simulator."""
