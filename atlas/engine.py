"""Per-application engine state and component factories."""
from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from .access import AccessEvaluator
from .config import EngineConfig
from .error_log import ErrorLogSink
from .extensions import db
from .lifecycle import CompletionSweeper
from .timeutil import Clock, SystemClock

EXTENSION_KEY = "atlas"


@dataclass(frozen=True)
class EngineState:
    config: EngineConfig
    clock: Clock


def init_engine(app: Flask, clock: Clock | None = None) -> EngineState:
    state = EngineState(config=EngineConfig.from_mapping(app.config), clock=clock or SystemClock())
    app.extensions[EXTENSION_KEY] = state
    return state


def engine_state() -> EngineState:
    return current_app.extensions[EXTENSION_KEY]


def completion_sweeper() -> CompletionSweeper:
    state = engine_state()
    return CompletionSweeper(state.config, state.clock, db.session)


def access_evaluator() -> AccessEvaluator:
    state = engine_state()
    return AccessEvaluator(state.config, state.clock, db.session)


def error_log_sink() -> ErrorLogSink:
    return ErrorLogSink(db.session)
