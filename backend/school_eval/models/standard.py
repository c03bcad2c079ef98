from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from school_eval.core.database import Base


class Standard(Base):
    """Top-level evaluation category"""
    __tablename__ = "standards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    standard_no = Column(Integer, unique=True, index=True, nullable=False)
    title = Column(String(1000), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User")
    indicators = relationship(
        "Indicator",
        back_populates="standard",
        cascade="all, delete-orphan",
        order_by="[Indicator.code, Indicator.id]",
    )

    def __repr__(self):
        return f"<Standard {self.standard_no}>"
