"""FastAPI dependency injection for the postseason controller and settings."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from postseason.config import Settings
from postseason.core.controller import PlayoffController


async def get_settings(request: Request) -> Settings:
    """Get the application settings from app state."""
    return request.app.state.settings


async def get_controller(request: Request) -> PlayoffController:
    """Get the process-wide playoff controller from app state."""
    return request.app.state.controller


SettingsDep = Annotated[Settings, Depends(get_settings)]
ControllerDep = Annotated[PlayoffController, Depends(get_controller)]
