from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=3)
    description: str = Field(..., min_length=10)
    team_members: Optional[List[str]] = Field(default=None, alias="teamMembers")


class ProjectUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = Field(default=None, min_length=10)
    team_members: Optional[List[str]] = Field(default=None, alias="teamMembers")


class MembersReplace(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_members: List[str] = Field(..., alias="teamMembers")
