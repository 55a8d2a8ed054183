"""
Project: Restaurant POS Admin Backend
Date: October 2026

Description:
Application settings read from the environment (and a local .env file).
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env(name, default=None):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


class Config:
    SECRET_KEY = _env("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = _env("DATABASE_URL", "sqlite:///pos.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    STORE_CODE = _env("STORE_CODE")
    ADMIN_ROLES = tuple(r.strip() for r in _env("ADMIN_ROLES", "SUPER_ADMIN,OUTLET_MANAGER").split(",") if r.strip())
    DELETE_ROLES = tuple(r.strip() for r in _env("DELETE_ROLES", "SUPER_ADMIN").split(",") if r.strip())

    # code generation
    CODE_STRATEGY = _env("CODE_STRATEGY", "sequential")
    CODE_MAX_ATTEMPTS = int(_env("CODE_MAX_ATTEMPTS", "5"))
    CODE_INSERT_RETRIES = int(_env("CODE_INSERT_RETRIES", "3"))
    CODE_RANDOM_LENGTH = int(_env("CODE_RANDOM_LENGTH", "4"))

    SOCKETIO_ASYNC_MODE = _env("SOCKETIO_ASYNC_MODE", "eventlet")
    LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
