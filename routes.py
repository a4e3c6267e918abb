# routes.py
from fastapi import FastAPI
from controller.run_controller import run_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(run_router)
