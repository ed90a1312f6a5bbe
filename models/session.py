"""
Session model: binds one refresh token to a user.
Fields:
- id (primary key) - equals the refresh token's JTI
- user_id (String(36)) - FK to users.id
- refresh_token - the signed token string as issued
- user_agent, client_ip - stored verbatim from the issuing request
- is_blocked (bool), expires_at, created_at
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Session(BaseModel, Base):
    __tablename__ = "sessions"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    refresh_token = Column(Text, nullable=False)
    user_agent = Column(String(512), nullable=False, default="")
    client_ip = Column(String(64), nullable=False, default="")
    is_blocked = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="sessions")

    def __repr__(self):
        return f"<Session id={self.id} user={self.user_id} blocked={self.is_blocked}>"
