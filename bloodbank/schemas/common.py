from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional
from uuid import UUID

# Record ids go out as _id, the key the dashboards read
ObjectId = Annotated[UUID, Field(validation_alias=AliasChoices("id", "_id"), serialization_alias="_id")]

class CamelModel(BaseModel):
    """Base for request/response bodies: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

class UserSummary(CamelModel):
    """User fields shown when another record refers to a user."""
    id: ObjectId
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    contact_number: Optional[str] = None