"""
Base schema - snake_case attributes, camelCase JSON

The browser client speaks camelCase (ownerId, uploadedBy, ...). Requests
accept either spelling.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
