from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ...schemas import CamelModel


class SystemLogRead(CamelModel):
    id: str
    user_id: Optional[str] = None
    action: str
    module: str
    resource_id: Optional[str] = None
    details: Optional[Any] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: datetime
