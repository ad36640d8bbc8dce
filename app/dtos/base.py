"""
Base model for DTOs that go over the wire (camelCase JSON, snake_case Python)
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json(self) -> dict:
        """JSON-compatible dict using wire (camelCase) names"""
        return self.model_dump(by_alias=True, mode="json")
