"""Department and ActivityLog records."""
from typing import Optional


class Department:
    """An organizational unit users belong to."""

    def __init__(
            self,
            name: str,
            description: Optional[str] = None,
            id: Optional[str] = None,
            created_at: Optional[str] = None,
            updated_at: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.description = description
        self.created_at = created_at
        self.updated_at = updated_at


class ActivityLog:
    """Audit record of a create/update/delete performed by a user."""

    def __init__(
            self,
            user_id: str,
            action: str,
            entity: str,
            entity_id: Optional[str] = None,
            description: Optional[str] = None,
            id: Optional[str] = None,
            created_at: Optional[str] = None,
    ):
        self.id = id
        self.user_id = user_id
        self.action = action
        self.entity = entity
        self.entity_id = entity_id
        self.description = description
        self.created_at = created_at
