"""AI-assisted plant search and plant/cell fit scoring."""

from __future__ import annotations

import logging
import uuid
from typing import Union

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from sqlmodel import Session

from plotplanner.api.deps import get_ai_gateway, get_current_user_id, get_db, get_weather_limiter
from plotplanner.api.errors import ai_error_response, log_api_error, weather_error_response
from plotplanner.core.errors import AIRequestFailed, WeatherRefreshFailed
from plotplanner.models import GridCellType
from plotplanner.services.ai_mock import MockAIGateway
from plotplanner.services.ai_schemas import PlantFitResult, PlantSearchResult
from plotplanner.services.openrouter import OpenRouterGateway, build_fit_context
from plotplanner.services.plans import PlanService
from plotplanner.services.rate_limiter import InMemoryRateLimiter
from plotplanner.services.weather import WeatherService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai/plants", tags=["ai"])

Gateway = Union[OpenRouterGateway, MockAIGateway]


class PlantSearchCommand(BaseModel):
    query: str = Field(min_length=2, max_length=200)

    @field_validator("query", mode="before")
    @classmethod
    def strip_query(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class PlantFitCommand(BaseModel):
    plan_id: uuid.UUID
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    plant_name: str = Field(min_length=1, max_length=200)

    @field_validator("plant_name", mode="before")
    @classmethod
    def strip_plant_name(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class PlantSearchResponse(BaseModel):
    data: PlantSearchResult


class PlantFitResponse(BaseModel):
    data: PlantFitResult


@router.post("/search", response_model=PlantSearchResponse)
async def search_plants(
    command: PlantSearchCommand,
    user_id: uuid.UUID = Depends(get_current_user_id),
    gateway: Gateway = Depends(get_ai_gateway),
) -> Union[PlantSearchResponse, JSONResponse]:
    try:
        result = await gateway.search(command.query)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AIRequestFailed as exc:
        log_api_error(exc, "/ai/plants/search", "POST", str(user_id), {"query_length": len(command.query)})
        return ai_error_response(exc.error)

    logger.info("AI search returned %d candidates", len(result.candidates))
    return PlantSearchResponse(data=result)


@router.post("/fit", response_model=PlantFitResponse)
async def check_plant_fit(
    command: PlantFitCommand,
    session: Session = Depends(get_db),
    user_id: uuid.UUID = Depends(get_current_user_id),
    limiter: InMemoryRateLimiter = Depends(get_weather_limiter),
    gateway: Gateway = Depends(get_ai_gateway),
) -> Union[PlantFitResponse, JSONResponse]:
    """Score how well a plant suits one soil cell using the plan's cached climate."""

    params = {"plan_id": str(command.plan_id), "x": command.x, "y": command.y}
    plans = PlanService(session)
    try:
        plan = plans.get_owned(command.plan_id, user_id)
        cell = plans.get_cell(command.plan_id, command.x, command.y) if plan is not None else None
    except WeatherRefreshFailed as exc:
        log_api_error(exc, "/ai/plants/fit", "POST", str(user_id), params)
        return weather_error_response(exc.error)

    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    if not plan.has_location:
        raise HTTPException(status_code=422, detail="Plan must have a location set before checking plant fit")
    if cell is None:
        raise HTTPException(status_code=422, detail=f"Cell ({command.x}, {command.y}) does not exist in this plan")
    if cell.type != GridCellType.soil:
        raise HTTPException(status_code=422, detail="Plants can only be placed on soil cells")

    try:
        rows = WeatherService(session, limiter).get_monthly(plan.id, user_id)
    except WeatherRefreshFailed as exc:
        log_api_error(exc, "/ai/plants/fit", "POST", str(user_id), params)
        return weather_error_response(exc.error)

    context = build_fit_context(plan, command.x, command.y, command.plant_name, rows)
    try:
        result = await gateway.check_fit(context)
    except AIRequestFailed as exc:
        log_api_error(exc, "/ai/plants/fit", "POST", str(user_id), params)
        return ai_error_response(exc.error)

    return PlantFitResponse(data=result)


__all__ = ["router"]
