"""
Request and response schemas for users and their orders.

The API speaks camelCase (userId, fullName, ...); fields are snake_case in
Python and mapped through an alias generator. Input schemas are strict for
numbers and booleans, so "12" is rejected where a number is expected, and
every violated constraint is reported in one ValidationError.
"""
from datetime import datetime, timezone
from typing import Annotated, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    StringConstraints,
    field_validator,
)
from pydantic.alias_generators import to_camel

TrimmedStr = Annotated[StrictStr, StringConstraints(strip_whitespace=True, min_length=1)]
NameStr = Annotated[
    StrictStr, StringConstraints(strip_whitespace=True, min_length=1, max_length=30)
]
Price = Annotated[float, Field(strict=True, allow_inf_nan=False)]
Quantity = Annotated[StrictInt, Field(ge=1)]


def _check_email(value: str) -> str:
    # Format check only: the address is stored as given, not normalized
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"value is not a valid email address: {exc}") from exc
    return value


Email = Annotated[TrimmedStr, AfterValidator(_check_email)]

DEFAULT_CREATED_BY = ""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FullName(CamelModel):
    first_name: NameStr
    last_name: NameStr


class Address(CamelModel):
    street: TrimmedStr
    city: TrimmedStr
    country: TrimmedStr


class OrderCreate(CamelModel):
    product_name: TrimmedStr
    price: Price
    quantity: Quantity


class UserCreate(CamelModel):
    """A complete user document; optional fields are filled with their defaults"""

    user_id: StrictInt
    username: TrimmedStr
    password: TrimmedStr
    full_name: FullName
    age: StrictInt
    email: Email
    is_active: StrictBool = True
    hobbies: list[StrictStr] = Field(default_factory=list)
    address: Address
    orders: list[OrderCreate] = Field(default_factory=list)
    date_created: datetime = Field(default_factory=_utc_now)
    created_by: StrictStr = DEFAULT_CREATED_BY
    date_modified: Optional[datetime] = None
    modified_by: Optional[StrictStr] = None
    is_deleted: StrictBool = False

    @field_validator("date_created", "date_modified")
    @classmethod
    def normalize_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps are taken as UTC, aware ones are converted to it
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class UserRequest(BaseModel):
    """Body of POST /users and PUT /users/{userId}"""

    user: UserCreate


class OrderRequest(BaseModel):
    """Body of PUT /users/{userId}/orders"""

    order: OrderCreate


class OrderResponse(CamelModel):
    product_name: str
    price: float
    quantity: int


class UserResponse(CamelModel):
    """A stored user as returned to callers, the password is always masked"""

    user_id: int
    username: str
    password: str
    full_name: FullName
    age: int
    email: str
    is_active: bool
    hobbies: list[str]
    address: Address
    orders: list[OrderResponse]
    date_created: datetime
    created_by: str
    date_modified: Optional[datetime] = None
    modified_by: Optional[str] = None
    is_deleted: bool


class OrdersData(CamelModel):
    orders: list[OrderResponse]


class TotalPriceData(CamelModel):
    total_price: float
