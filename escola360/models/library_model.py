from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from escola360.models.planning_model import BimesterPlan


class LibraryItemType(str, Enum):
    PLANNING = "PLANNING"
    DOCUMENT = "DOCUMENT"


class LibraryItem(BaseModel):
    """Persisted envelope: identity, title and timestamp around a saved plan."""

    id: str
    type: LibraryItemType
    title: str
    created_at: str = Field(..., alias="createdAt")  # ISO-8601 UTC
    content: BimesterPlan
    metadata: Optional[Dict[str, Any]] = None  # free-form annotation (grade, subject, bimester, curriculum)

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)
