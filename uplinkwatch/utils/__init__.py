"""Utility helpers for the connectivity watchdog."""
