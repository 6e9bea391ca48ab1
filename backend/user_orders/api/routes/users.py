from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from user_orders.api.dependencies import get_user_service
from user_orders.schemas.response import ApiResponse
from user_orders.schemas.user import OrderRequest, UserRequest
from user_orders.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])

# Handlers are plain functions: FastAPI runs them in its thread pool, so the
# blocking database and bcrypt calls don't hold up the event loop


def envelope_response(
    result: ApiResponse,
    success_status: int = status.HTTP_200_OK,
    failure_status: int = status.HTTP_404_NOT_FOUND,
) -> JSONResponse:
    """Send an envelope with the status picked from its success flag"""
    # exclude_unset in to_content(): failures carry no "data" key
    return JSONResponse(
        status_code=success_status if result.success else failure_status,
        content=result.to_content(),
    )


@router.get("")
def get_users(service: UserService = Depends(get_user_service)):
    """List all users"""
    return envelope_response(service.get_users())


@router.post("")
def create_user(payload: UserRequest, service: UserService = Depends(get_user_service)):
    """Create a new user"""
    # 201 when created, 400 when the user already exists or the store failed
    return envelope_response(
        service.create_user(payload.user),
        success_status=status.HTTP_201_CREATED,
        failure_status=status.HTTP_400_BAD_REQUEST,
    )


@router.get("/{user_id}")
def get_user_by_user_id(
    user_id: int,
    service: UserService = Depends(get_user_service),
):
    """Get a specific user"""
    return envelope_response(service.get_user_by_user_id(user_id))


@router.put("/{user_id}")
def update_user_by_user_id(
    user_id: int,
    payload: UserRequest,
    service: UserService = Depends(get_user_service),
):
    """Replace a user document"""
    return envelope_response(service.update_user_by_id(user_id, payload.user))


@router.put("/{user_id}/orders")
def add_new_product_in_order(
    user_id: int,
    payload: OrderRequest,
    service: UserService = Depends(get_user_service),
):
    """Append an order to a user"""
    # data is null on success, the updated user is not returned
    return envelope_response(service.add_new_product_in_order(user_id, payload.order))


@router.get("/{user_id}/orders")
def get_all_orders_by_user_id(
    user_id: int,
    service: UserService = Depends(get_user_service),
):
    """List a user's orders"""
    return envelope_response(service.get_all_orders_by_user_id(user_id))


@router.get("/{user_id}/orders/total-price")
def get_total_price_of_all_orders_by_user_id(
    user_id: int,
    service: UserService = Depends(get_user_service),
):
    """Sum of the prices of a user's orders"""
    return envelope_response(service.get_total_price_of_all_orders_by_user_id(user_id))
