from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "healthy"


class ActionInfo(BaseModel):
    id: str
    label: str
    output_format: Literal["markdown", "comma_separated"] = Field(alias="outputFormat")

    model_config = {"populate_by_name": True}


class ActionListResponse(BaseModel):
    actions: list[ActionInfo]
