"""
Shared schema base.

Python code uses snake_case; the browser client speaks camelCase
(`videoId`, `isLiked`, `watchedAt`), so every schema serializes by alias.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
