# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_required(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


def _normalise_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if "@" not in v:
        raise ValueError("email must contain '@'")
    return v


class MemberCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255)
    upline_id: Optional[int] = Field(default=None, alias="uplineId", ge=1)

    @field_validator("name", "phone")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return _normalise_email(v)


class MemberUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    upline_id: Optional[int] = Field(default=None, alias="uplineId", ge=1)

    @field_validator("name", "phone")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalise_email(v)

    def changes(self) -> dict:
        """Fields explicitly sent by the client; ``uplineId: null`` is kept, other nulls dropped."""
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k == "upline_id"}


class MemberOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    address: str
    phone: str
    email: str
    upline_id: Optional[int] = Field(default=None, alias="uplineId")


class MemberSummary(BaseModel):
    id: int
    name: str


class SearchResult(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    upline: Optional[MemberSummary] = None
    downlines: List[MemberSummary] = []


class CascadeResult(BaseModel):
    deleted: int
    count: int
