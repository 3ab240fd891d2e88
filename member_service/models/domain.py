# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.
"""
from typing import Any, Optional

from pydantic import BaseModel

MEMBER_FIELDS = ("name", "address", "phone", "email", "upline_id")


class Member(BaseModel):
    """A single node of the referral hierarchy; ``upline_id`` is its only parent edge."""

    id: int
    name: str
    address: str = ""
    phone: str
    email: str
    upline_id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "uplineId": self.upline_id,
        }

    def summary(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}
