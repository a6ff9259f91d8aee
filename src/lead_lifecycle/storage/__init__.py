"""Storage layer: persistence backends and lead data models."""

from .persistence import PersistenceStore, MemoryStore, JsonFileStore, SQLiteStore, create_store
from .models import (
    Lead,
    LeadStatus,
    LeadProfile,
    LeadPredictions,
    EngagementActivity,
    AttributionData,
)

__all__ = [
    "PersistenceStore",
    "MemoryStore",
    "JsonFileStore",
    "SQLiteStore",
    "create_store",
    "Lead",
    "LeadStatus",
    "LeadProfile",
    "LeadPredictions",
    "EngagementActivity",
    "AttributionData",
]
