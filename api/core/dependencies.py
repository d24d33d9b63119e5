"""
FastAPI dependencies for app-scoped objects built in `main.create_app`.
"""

from __future__ import annotations

from fastapi import Request

from .config import AppConfig
from .db import Database


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_config(request: Request) -> AppConfig:
    return request.app.state.config
