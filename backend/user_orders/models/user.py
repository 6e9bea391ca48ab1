from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String
from sqlalchemy.orm import relationship

from user_orders.core.database import Base


class User(Base):
    """
    User document.

    The nested fullName and address objects are flattened into columns,
    orders live in their own table (see Order) and are loaded with the user.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # userId and username are checked before insert, the unique indexes
    # catch concurrent duplicates that slip past the check
    user_id = Column(Integer, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)
    # bcrypt hash, never the plaintext password
    hashed_password = Column(String, nullable=False)

    first_name = Column(String(30), nullable=False)
    last_name = Column(String(30), nullable=False)
    age = Column(Integer, nullable=False)
    email = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    hobbies = Column(JSON, nullable=False, default=list)

    street = Column(String, nullable=False)
    city = Column(String, nullable=False)
    country = Column(String, nullable=False)

    date_created = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(String, nullable=False)
    date_modified = Column(DateTime(timezone=True), nullable=True)
    modified_by = Column(String, nullable=True)
    # Soft-delete flag, stored but not acted on by any endpoint
    is_deleted = Column(Boolean, nullable=False, default=False)

    orders = relationship(
        "Order",
        back_populates="user",
        order_by="Order.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
