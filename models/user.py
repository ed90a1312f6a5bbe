from models.base_model import Base, BaseModel
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    fullname = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)

    sessions = relationship("Session", back_populates="user", passive_deletes=True)
    carts = relationship("Cart", back_populates="user", passive_deletes=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
