"""Shared utilities used across layers (telemetry, date helpers)."""
