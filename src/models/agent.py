"""Agent model - accounts that receive distributed tasks."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Agent(BaseModel):
    """Agent account as read from the users table (role = 'agent')."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="User ID (text)")
    name: str = Field(..., description="Display name")
    email: Optional[str] = Field(None, description="Email address")
    mobile_number: Optional[str] = Field(None, description="Mobile number")
    country_code: Optional[str] = Field(None, description="Dialling code, e.g. +1")
    created_at: Optional[str] = None
