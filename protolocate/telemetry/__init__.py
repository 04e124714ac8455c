"""Telemetry and observability helpers.

This package emits deterministic resolution events for build diagnostics.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
