# Re-export all models for convenient imports
from school_eval.models.user import User, UserRole
from school_eval.models.standard import Standard
from school_eval.models.indicator import Indicator, ProgressStatus
from school_eval.models.checklist import ChecklistItem, Comment
from school_eval.models.evidence import (
    EvidenceFile,
    EvidenceStorage,
    EvidenceLocation,
    RemoteLocation,
    LocalLocation,
    ExternalLinkLocation,
)

__all__ = [
    # User
    "User",
    "UserRole",
    # Evaluation tree
    "Standard",
    "Indicator",
    "ProgressStatus",
    "ChecklistItem",
    "Comment",
    # Evidence
    "EvidenceFile",
    "EvidenceStorage",
    "EvidenceLocation",
    "RemoteLocation",
    "LocalLocation",
    "ExternalLinkLocation",
]
