from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...schemas import CamelModel


class AttachmentRead(CamelModel):
    id: str
    filename: str
    original_name: str
    path: str
    mimetype: str
    size: int
    uploaded_at: datetime
    uploaded_by: Optional[str] = None
