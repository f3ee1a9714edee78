# image_queue/schemas/base.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema for ORM-backed models, serialized with camelCase keys"""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class CamelModel(BaseModel):
    """Request/response bodies use camelCase keys on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
