from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AuthUser(BaseModel):
    """The signed-in user as the backend describes it."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )
    id: str = Field(alias="_id", validation_alias=AliasChoices("_id", "id"))
    email: str
    name: str = ""
    garden_type: Optional[str] = None
    experience_level: Optional[str] = None
    location: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if v is not None else v

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
