# app/schemas/history.py

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import Field

from app.models.enums import HistoryAction
from app.schemas.common import CamelModel
from app.schemas.user import UserSummary


class HistoryRead(CamelModel):
    """
    One history entry of a versioned entity, as shown in the admin history view.
    """

    id: UUID = Field(..., description="Unique ID of the history entry")
    action: HistoryAction = Field(..., description="UPDATE or ROLLBACK")
    changed_at: datetime = Field(..., description="When the entry was written")
    changed_by: Optional[UserSummary] = Field(
        None, description="Author of the change, null if the account is gone"
    )
    changed_fields: List[str] = Field(
        default_factory=list, description="Fields the update touched"
    )
    snapshot: dict[str, Any] = Field(
        ..., description="Tracked fields as they were before the change"
    )


class HistoryDiff(CamelModel):
    """
    Difference between a history snapshot and the entity's current state,
    i.e. what a rollback to this entry would change.
    """

    history_id: UUID
    # jsondiff symmetric syntax: {field: [current, snapshot]}
    diff: Any
