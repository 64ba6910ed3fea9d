from fastapi import Request

from talks.app_state import Services


def get_services(request: Request) -> Services:
    return request.app.state.services
