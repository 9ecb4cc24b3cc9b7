"""Per-request credentials forwarded to the remote stores"""

from dataclasses import dataclass
from typing import Dict, Optional

ADMIN = "admin"
OWNER = "owner"
SUPPLIER = "supplier"
ROLES = (ADMIN, OWNER, SUPPLIER)


@dataclass(frozen=True)
class ApiSession:
    """Caller identity, passed explicitly to every store call"""

    token: Optional[str] = None
    role: Optional[str] = None
    user_id: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
