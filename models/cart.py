from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Cart(BaseModel, Base):
    __tablename__ = "carts"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), nullable=False)
    qty = Column(Integer, nullable=False, default=1)
    note = Column(String(255), nullable=True)

    user = relationship("User", back_populates="carts")

    __table_args__ = (
        CheckConstraint("qty >= 1", name="ck_carts_qty_positive"),
    )
