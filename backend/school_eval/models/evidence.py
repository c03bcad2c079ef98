"""
Evidence file model and its storage location variants.

Where the backing blob lives is recorded explicitly in the ``storage`` column
and exposed as one of three location types:

    RemoteLocation(object_id, link)     - file in Google Drive
    LocalLocation(stored_name, link)    - file under the uploads directory
    ExternalLinkLocation(url)           - bare link, no blob of our own
"""

from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
import enum

from school_eval.core.database import Base


class EvidenceStorage(str, enum.Enum):
    """Where an evidence blob is stored"""
    DRIVE = "DRIVE"
    LOCAL = "LOCAL"
    LINK = "LINK"


@dataclass(frozen=True)
class RemoteLocation:
    object_id: str
    link: str


@dataclass(frozen=True)
class LocalLocation:
    stored_name: Optional[str]
    link: str


@dataclass(frozen=True)
class ExternalLinkLocation:
    url: str


EvidenceLocation = Union[RemoteLocation, LocalLocation, ExternalLinkLocation]


def storage_of(location: EvidenceLocation) -> EvidenceStorage:
    """Map a location variant to its storage tag"""
    if isinstance(location, RemoteLocation):
        return EvidenceStorage.DRIVE
    if isinstance(location, LocalLocation):
        return EvidenceStorage.LOCAL
    if isinstance(location, ExternalLinkLocation):
        return EvidenceStorage.LINK
    raise TypeError(f"Unknown evidence location: {location!r}")


class EvidenceFile(Base):
    """File or link attached to a checklist item as proof of completion"""
    __tablename__ = "evidence_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    checklist_item_id = Column(Integer, ForeignKey("checklist_items.id"), index=True, nullable=False)
    # Redundant parent reference for indicator-level queries
    indicator_id = Column(Integer, ForeignKey("indicators.id"), index=True, nullable=True)

    filename = Column(String(500), nullable=False)
    path = Column(Text, nullable=False)  # canonical retrievable location
    storage = Column(SQLEnum(EvidenceStorage), nullable=False)
    drive_file_id = Column(String(255), nullable=True)  # set iff storage == DRIVE
    local_name = Column(String(500), nullable=True)  # set iff storage == LOCAL
    web_view_link = Column(Text, nullable=True)
    mime_type = Column(String(255), nullable=True)
    size_bytes = Column(Integer, nullable=True)
    uploaded_by = Column(String(255), default="Teacher", nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    checklist_item = relationship("ChecklistItem", back_populates="evidence")

    @property
    def location(self) -> EvidenceLocation:
        if self.storage == EvidenceStorage.DRIVE:
            return RemoteLocation(object_id=self.drive_file_id, link=self.web_view_link or self.path)
        if self.storage == EvidenceStorage.LOCAL:
            return LocalLocation(stored_name=self.local_name, link=self.path)
        if self.storage == EvidenceStorage.LINK:
            return ExternalLinkLocation(url=self.path)
        raise ValueError(f"Evidence {self.id} has unknown storage {self.storage!r}")

    def __repr__(self):
        return f"<EvidenceFile {self.filename} ({self.storage})>"
