from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from user_orders.core.database import Base


class Order(Base):
    """An order line embedded in a user; it has no identity of its own in the API"""
    __tablename__ = "orders"

    # Autoincrement key doubles as the insertion order of a user's orders
    id = Column(Integer, primary_key=True, index=True)
    user_pk = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)

    user = relationship("User", back_populates="orders")
