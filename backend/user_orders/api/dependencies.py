from fastapi import Request

from user_orders.services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    """
    User service wired up in create_app().

    Route handlers receive it through Depends(), tests can replace it with
    app.dependency_overrides.
    """
    return request.app.state.user_service
