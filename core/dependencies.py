from fastapi import Request

from core.settings import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
