"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import State

from gleaner.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from gleaner.interfaces.composition import EngineContext


class AppState(State):
    """FastAPI application state.

    Lifecycle managed by composition.py::lifespan().
    """

    config: AppConfig
    engine: EngineContext
