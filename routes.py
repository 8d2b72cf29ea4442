# routes.py
from fastapi import FastAPI
from controller.admin_controller import admin_router
from controller.chat_controller import chat_router
from controller.student_controller import student_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(chat_router)
    app.include_router(admin_router)
    app.include_router(student_router)
