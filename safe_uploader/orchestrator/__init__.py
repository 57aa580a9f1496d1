"""Orchestrator package - coordinates profile driven uploads."""
from .core import SafeUploader
from .run import RunRecorder

__all__ = ["SafeUploader", "RunRecorder"]
