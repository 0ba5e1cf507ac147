"""Testing utilities: a manual timer and scripted operations for deterministic retry tests."""

from .fakes import Invocation, ManualHandle, ManualTimer, ScriptedOperation

__all__ = ["Invocation", "ManualHandle", "ManualTimer", "ScriptedOperation"]
