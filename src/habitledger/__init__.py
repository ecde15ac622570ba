"""Recurrence-aware habit completion and streak engine."""

from __future__ import annotations

from .config import BaseConfig
from .context import EngineContext, build_context, create_engine_context

__all__ = ["BaseConfig", "EngineContext", "build_context", "create_engine_context"]
