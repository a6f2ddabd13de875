"""Aggregate app for the SCXML editing engines."""
from __future__ import annotations

from fastapi import FastAPI

from statechart_engines.common.health import router as health_router
from statechart_engines.editor_session.routes import router as session_router
from statechart_engines.scxml_commands.routes import router as commands_router


def create_app() -> FastAPI:
    app = FastAPI(title="Statechart Engines")
    app.include_router(health_router)
    app.include_router(commands_router)
    app.include_router(session_router)
    return app


app = create_app()
