"""Shared base for gateway schemas.

Learn: The gateway speaks camelCase (nextCursor, totalCount, ownerId) like
any GraphQL client expects, while Python code keeps snake_case. The alias
generator bridges the two; populate_by_name lets services and tests build
models with either spelling.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class GatewayModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
