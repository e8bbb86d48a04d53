# ordertrack/schemas/airtable.py

"""
Форма ответа Airtable REST API (list records):

    {"records": [{"id": "rec...", "createdTime": "2025-05-01T10:00:00.000Z",
                  "fields": {"Order Number": "...", ...}}],
     "offset": "..."}

Проверяется только конверт записи; содержимое fields разбирается
адаптером по таблице соответствия колонок.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class AirtableRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    created_time: Optional[str] = Field(None, alias="createdTime")
    fields: Dict[str, Any]


class AirtableListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # элементы оставляем сырыми: каждая запись валидируется отдельно
    records: List[Any]
    offset: Optional[str] = None
