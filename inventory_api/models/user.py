from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from inventory_api.database import Base


class User(Base):
    """API user. Only a bcrypt hash of the password is stored."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
