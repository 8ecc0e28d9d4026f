"""
Optimistic managers for the profile sub-resources.

Public API:
- EducationManager, ExperienceManager, ApplicationsManager
- OptimisticCollection, MutationResult: shared base and result type
- PendingMutationTracker, BusyFlag: in-flight bookkeeping
- EducationEntry, ExperienceEntry, ApplicationRecord: item models
"""

from .applications import ApplicationsManager
from .education import EducationManager
from .experience import ExperienceManager
from .manager import MutationResult, OptimisticCollection
from .models import (
    ApplicationRecord,
    ApplicationStatus,
    EducationEntry,
    EducationLevel,
    ExperienceEntry,
    ResourceItem,
)
from .pending import BusyFlag, PendingMutationTracker

__all__ = [
    "ApplicationsManager",
    "EducationManager",
    "ExperienceManager",
    "MutationResult",
    "OptimisticCollection",
    "ApplicationRecord",
    "ApplicationStatus",
    "EducationEntry",
    "EducationLevel",
    "ExperienceEntry",
    "ResourceItem",
    "BusyFlag",
    "PendingMutationTracker",
]
