from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer
from datetime import datetime
import enum

from school_eval.core.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class User(Base):
    """School staff member referenced by standards, indicators and checklist items"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.TEACHER, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.name}>"
