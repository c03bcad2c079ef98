from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from school_eval.core.database import Base


class ProgressStatus(str, enum.Enum):
    """Completion status shared by indicators and checklist items"""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Indicator(Base):
    """Measurable sub-criterion within a standard"""
    __tablename__ = "indicators"

    id = Column(Integer, primary_key=True, autoincrement=True)
    standard_id = Column(Integer, ForeignKey("standards.id", ondelete="CASCADE"), index=True, nullable=False)

    code = Column(String(50), nullable=False)
    name = Column(String(1000), nullable=False)
    status = Column(SQLEnum(ProgressStatus), default=ProgressStatus.NOT_STARTED, nullable=False)
    progress = Column(Integer, default=0, nullable=False)  # 0-100, cached from checklist
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    standard = relationship("Standard", back_populates="indicators")
    manager = relationship("User")
    checklist = relationship(
        "ChecklistItem",
        back_populates="indicator",
        cascade="all, delete-orphan",
        order_by="ChecklistItem.id",
    )

    def __repr__(self):
        return f"<Indicator {self.code}>"
