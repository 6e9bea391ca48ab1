import logging

from user_orders.core.exceptions import InfrastructureError
from user_orders.schemas.response import ApiResponse, ErrorDetail
from user_orders.schemas.user import (
    OrderCreate,
    OrdersData,
    TotalPriceData,
    UserCreate,
    UserResponse,
)
from user_orders.storage.user_store import UserStore

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"


def user_not_found() -> ApiResponse:
    """Failure envelope shared by every operation addressing a missing user"""
    return ApiResponse(
        success=False,
        message=USER_NOT_FOUND_MESSAGE,
        error=ErrorDetail(code=404, message=USER_NOT_FOUND_MESSAGE),
    )


def users_found_result(users: list[UserResponse]) -> ApiResponse[list[UserResponse]]:
    """An empty collection is reported as a failure, not as an empty list"""
    if not users:
        return ApiResponse(success=False, message="No users found")
    return ApiResponse(success=True, message="Users fetched successfully!", data=users)


def something_went_wrong(exc: InfrastructureError) -> ApiResponse:
    logger.error(f"Persistence failure: {exc}")
    return ApiResponse(success=False, message="Something went wrong", error=exc.to_dict())


class UserService:
    """
    Use cases for users and their orders.

    Expected outcomes (duplicate, not found, empty collection) are returned
    as failure envelopes, never raised. Persistence failures are reported
    with the generic "Something went wrong" envelope.
    """

    def __init__(self, store: UserStore):
        self._store = store

    def create_user(self, user: UserCreate) -> ApiResponse[UserResponse]:
        try:
            if self._store.exists(user.user_id, user.username):
                return ApiResponse(success=False, message="User already exists")
            created = self._store.insert(user)
            return ApiResponse(success=True, message="User created successfully", data=created)
        except InfrastructureError as exc:
            return something_went_wrong(exc)

    def get_users(self) -> ApiResponse[list[UserResponse]]:
        try:
            return users_found_result(self._store.find_all())
        except InfrastructureError as exc:
            return something_went_wrong(exc)

    def get_user_by_user_id(self, user_id: int) -> ApiResponse[UserResponse]:
        try:
            user = self._store.find_by_user_id(user_id)
            if user is None:
                return user_not_found()
            return ApiResponse(success=True, message="User fetched successfully!", data=user)
        except InfrastructureError as exc:
            return something_went_wrong(exc)

    def update_user_by_id(self, user_id: int, user: UserCreate) -> ApiResponse[UserResponse]:
        try:
            if not self._store.exists(user_id=user_id):
                return user_not_found()
            updated = self._store.replace_by_user_id(user_id, user)
            # Removed between the existence check and the replace
            if updated is None:
                return user_not_found()
            return ApiResponse(success=True, message="User updated successfully!", data=updated)
        except InfrastructureError as exc:
            return something_went_wrong(exc)

    def add_new_product_in_order(self, user_id: int, order: OrderCreate) -> ApiResponse[None]:
        try:
            if not self._store.append_order(user_id, order):
                return user_not_found()
            logger.info(f"Order for {order.product_name!r} added to user {user_id}")
            return ApiResponse(success=True, message="Order added successfully", data=None)
        except InfrastructureError as exc:
            return something_went_wrong(exc)

    def get_all_orders_by_user_id(self, user_id: int) -> ApiResponse[OrdersData]:
        try:
            user = self._store.find_by_user_id(user_id)
            if user is None:
                return user_not_found()
            return ApiResponse(
                success=True,
                message="Orders fetched successfully",
                data=OrdersData(orders=user.orders),
            )
        except InfrastructureError as exc:
            return something_went_wrong(exc)

    def get_total_price_of_all_orders_by_user_id(self, user_id: int) -> ApiResponse[TotalPriceData]:
        try:
            user = self._store.find_by_user_id(user_id)
            if user is None:
                return user_not_found()
            # Sum of prices only, quantity is not factored in
            total_price = sum(order.price for order in user.orders)
            return ApiResponse(
                success=True,
                message="Total price fetched successfully",
                data=TotalPriceData(total_price=total_price),
            )
        except InfrastructureError as exc:
            return something_went_wrong(exc)
