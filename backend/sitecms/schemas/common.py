"""Shared schema base classes."""
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Public JSON uses camelCase; Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ActorSummary(ApiModel):
    """Display fields of the admin that last touched a record."""
    id: int = Field(validation_alias=AliasChoices("admin_id", "id"), serialization_alias="id")
    name: str
    email: str
