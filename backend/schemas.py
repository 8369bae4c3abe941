# backend/schemas.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SimulateRequest(_CamelModel):
    farm_id: Optional[int] = Field(None, alias="farmId")
    days: int = Field(60, ge=0, le=365)


class DisasterRequest(_CamelModel):
    farm_id: Optional[int] = Field(None, alias="farmId")
    type: Optional[str] = None          # flood | drought | pest
    start_day: int = Field(10, alias="startDay", ge=0)
    duration: int = Field(5, gt=0)
    severity: float = Field(0.8, ge=0, le=1)


class DemoAlertRequest(_CamelModel):
    farm_id: Optional[int] = Field(None, alias="farmId")
    severity: Optional[str] = None
