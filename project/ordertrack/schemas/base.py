# ordertrack/schemas/base.py

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Базовая схема API: в JSON поля в camelCase, в Python snake_case."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

class ErrorResponse(BaseModel):
    message: str
    details: Optional[Any] = None
