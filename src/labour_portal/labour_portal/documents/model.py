from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Document:
    """Metadata for a file a user uploaded; ``path`` points at storage managed elsewhere."""

    document_id: int
    user_id: int
    name: str
    path: str
    uploaded_at: datetime
    approved: bool = False
    username: Optional[str] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        out = {
            "id": self.document_id,
            "userId": self.user_id,
            "name": self.name,
            "path": self.path,
            "uploadedAt": self.uploaded_at.isoformat(),
            "approved": self.approved,
        }
        if self.username is not None:
            out["username"] = self.username
        return out
