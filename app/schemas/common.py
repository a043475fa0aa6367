# Shared pydantic config: snake_case in Python, camelCase on the wire

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both field names and camelCase aliases; responses are serialized by alias."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ErrorOut(BaseModel):
    """Body of every error response (see error_handlers.py)."""

    kind: str
    message: str


# documented on every router; the handlers in error_handlers.py produce these bodies
ERROR_RESPONSES = {status: {"model": ErrorOut} for status in (400, 401, 403, 404, 409, 500)}
