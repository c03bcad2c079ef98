from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from school_eval.core.database import Base
from school_eval.models.indicator import ProgressStatus


class ChecklistItem(Base):
    """Atomic, checkable requirement fragment within an indicator"""
    __tablename__ = "checklist_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    indicator_id = Column(Integer, ForeignKey("indicators.id", ondelete="CASCADE"), index=True, nullable=False)

    text = Column(Text, nullable=False)
    status = Column(SQLEnum(ProgressStatus), default=ProgressStatus.NOT_STARTED, nullable=False)
    assignee_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    indicator = relationship("Indicator", back_populates="checklist")
    assignee = relationship("User")
    # Evidence blobs must be removed through EvidenceService.detach, so no delete cascade here
    evidence = relationship("EvidenceFile", back_populates="checklist_item", order_by="EvidenceFile.id")
    comments = relationship(
        "Comment",
        back_populates="checklist_item",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )

    def __repr__(self):
        return f"<ChecklistItem {self.id}>"


class Comment(Base):
    """Free-text note on a checklist item"""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    checklist_item_id = Column(Integer, ForeignKey("checklist_items.id", ondelete="CASCADE"), index=True, nullable=False)

    author_name = Column(String(255), default="Teacher", nullable=False)
    text = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    checklist_item = relationship("ChecklistItem", back_populates="comments")
