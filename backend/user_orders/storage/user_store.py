import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from user_orders.core.exceptions import InfrastructureError
from user_orders.core.security import PASSWORD_MASK, PasswordHasher
from user_orders.models.order import Order
from user_orders.models.user import User
from user_orders.schemas.user import (
    Address,
    FullName,
    OrderCreate,
    OrderResponse,
    UserCreate,
    UserResponse,
)

logger = logging.getLogger(__name__)


class UserStore:
    """
    Persistence for user documents; the only component that talks to the database.

    Every database error is re-raised as InfrastructureError. Read paths
    never expose the stored password, only PASSWORD_MASK.
    """

    def __init__(self, session_factory: sessionmaker, password_hasher: PasswordHasher):
        self._session_factory = session_factory
        self._password_hasher = password_hasher

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        # Driver errors not mapped by SQLAlchemy, e.g. an integer outside the
        # column range, are reported the same way
        except (SQLAlchemyError, OverflowError) as exc:
            db.rollback()
            raise InfrastructureError(f"Database error: {exc}") from exc
        finally:
            db.close()

    def exists(self, user_id: Optional[int] = None, username: Optional[str] = None) -> bool:
        """True if any stored user matches user_id OR username"""
        if user_id is None and username is None:
            raise ValueError("Either user_id or username must be provided")

        conditions = []
        if user_id is not None:
            conditions.append(User.user_id == user_id)
        if username is not None:
            conditions.append(User.username == username)

        with self._session() as db:
            found = db.scalar(select(User.id).where(or_(*conditions)).limit(1))
            return found is not None

    def insert(self, user: UserCreate) -> UserResponse:
        """
        Persist a new, already validated user.

        Callers check exists() first; there is no atomic check-and-insert, a
        concurrent duplicate is rejected by the unique indexes and surfaces
        as InfrastructureError.
        """
        record = User()
        self._apply(record, user)
        with self._session() as db:
            db.add(record)
            db.commit()
            logger.info(f"A new user was created (userId={record.user_id})")
            return _to_response(record)

    def find_all(self) -> list[UserResponse]:
        with self._session() as db:
            records = db.scalars(select(User).order_by(User.id)).all()
            return [_to_response(record) for record in records]

    def find_by_user_id(self, user_id: int) -> Optional[UserResponse]:
        with self._session() as db:
            record = db.scalar(select(User).where(User.user_id == user_id))
            if record is None:
                return None
            return _to_response(record)

    def replace_by_user_id(self, user_id: int, user: UserCreate) -> Optional[UserResponse]:
        """Replace the whole document, orders included; returns the updated user"""
        with self._session() as db:
            record = db.scalar(select(User).where(User.user_id == user_id))
            if record is None:
                return None
            self._apply(record, user)
            if record.date_modified is None:
                record.date_modified = datetime.now(timezone.utc)
            db.commit()
            return _to_response(record)

    def append_order(self, user_id: int, order: OrderCreate) -> bool:
        """Append one order to the user's orders; False if the user doesn't exist"""
        with self._session() as db:
            user_pk = db.scalar(select(User.id).where(User.user_id == user_id))
            if user_pk is None:
                return False
            db.add(
                Order(
                    user_pk=user_pk,
                    product_name=order.product_name,
                    price=order.price,
                    quantity=order.quantity,
                )
            )
            db.commit()
            return True

    def _apply(self, record: User, user: UserCreate) -> None:
        """Copy a validated user onto a record, normalizing names and hashing the password"""
        record.user_id = user.user_id
        record.username = user.username
        record.hashed_password = self._password_hasher.hash(user.password)
        record.first_name = user.full_name.first_name.capitalize()
        record.last_name = user.full_name.last_name.capitalize()
        record.age = user.age
        record.email = user.email
        record.is_active = user.is_active
        record.hobbies = list(user.hobbies)
        record.street = user.address.street
        record.city = user.address.city
        record.country = user.address.country
        record.date_created = user.date_created
        record.created_by = user.created_by
        record.date_modified = user.date_modified
        record.modified_by = user.modified_by
        record.is_deleted = user.is_deleted
        # Assigning a new list deletes the previous order rows (delete-orphan)
        record.orders = [
            Order(product_name=o.product_name, price=o.price, quantity=o.quantity)
            for o in user.orders
        ]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_response(record: User) -> UserResponse:
    return UserResponse(
        user_id=record.user_id,
        username=record.username,
        password=PASSWORD_MASK,
        full_name=FullName(first_name=record.first_name, last_name=record.last_name),
        age=record.age,
        email=record.email,
        is_active=record.is_active,
        hobbies=list(record.hobbies or []),
        address=Address(street=record.street, city=record.city, country=record.country),
        orders=[
            OrderResponse(product_name=o.product_name, price=o.price, quantity=o.quantity)
            for o in record.orders
        ],
        date_created=_as_utc(record.date_created),
        created_by=record.created_by,
        date_modified=_as_utc(record.date_modified),
        modified_by=record.modified_by,
        is_deleted=record.is_deleted,
    )
