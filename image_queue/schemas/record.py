from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class RemoteRecord(BaseModel):
    """A row of the remote record store as returned by its REST API."""
    id: str
    fields: Dict[str, Any] = Field(default_factory=dict)
    created_time: Optional[str] = Field(default=None, alias="createdTime")

    model_config = {"populate_by_name": True}

    def get(self, field: str, default: Any = None) -> Any:
        return self.fields.get(field, default)
