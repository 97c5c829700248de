"""OpenRouter client for plant search and plant/site fit scoring."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from plotplanner.core.config import settings
from plotplanner.core.errors import AIContext, AIRequestFailed
from plotplanner.models import Plan, WeatherMonthly
from plotplanner.services.ai_errors import create_ai_error, to_ai_error
from plotplanner.services.ai_schemas import (
    FitCell,
    FitClimate,
    FitLocation,
    MonthlyClimatePoint,
    PlantFitContext,
    PlantFitResult,
    PlantSearchResult,
)
from plotplanner.services.climate_scale import (
    NormalizedPercent,
    denormalize_precipitation,
    denormalize_temperature,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

MAX_INPUT_LENGTH = 200

SEARCH_SYSTEM_PROMPT = """You are a horticulture expert specialising in botany and garden plants.
Find the 1-5 garden plants that best match the user's query.

RULES:
1. Detect the language of the query (English, Polish, Latin, ...)
2. Order plants by how well they match
3. For each plant return:
   - name: common name in the language of the query
   - latin_name: full scientific name (genus + species + var. where relevant)
   - source: always "ai"
4. If the query is ambiguous, return the different interpretations
5. Prefer garden plants (vegetables, flowers, herbs, fruit trees) over wild ones

Return ONLY valid JSON with no extra commentary."""

FIT_SYSTEM_PROMPT = """You are a horticulture expert judging how well a plant suits a plot.
You receive detailed climate data and must score how well the plant will grow there.

SCORING (1-5):
- 5 (Excellent): ideal conditions, >=90% match with the plant's needs
- 4 (Good): favourable conditions, 80-89% match
- 3 (Fair): the plant survives but will not reach full potential, 70-79% match
- 2 (Poor): difficult conditions needing intensive care, 60-69% match
- 1 (Bad): unsuitable, <60% match, the plant will probably not survive

SEASON WEIGHTS (northern hemisphere):
- April-September (months 4-9): weight 2x (growing season)
- October-March (months 10-3): weight 1x

SCORES:
1. sunlight_score: sunlight
2. humidity_score: air humidity
3. precip_score: precipitation
4. overall_score: season-weighted overall judgement including temperature

Return ONLY valid JSON. All scores MUST be integers from 1 to 5."""


def sanitize_user_input(value: str) -> str:
    value = value.strip()[:MAX_INPUT_LENGTH]
    value = re.sub(r"[<>]", "", value)
    return re.sub(r"[\r\n]+", " ", value)


def build_fit_context(
    plan: Plan,
    x: int,
    y: int,
    plant_name: str,
    rows: Sequence[WeatherMonthly],
) -> PlantFitContext:
    """Assemble the per-request context sent to the fit model.

    Annual figures are converted back to physical units for readability.
    """

    monthly = [
        MonthlyClimatePoint(
            year=row.year,
            month=row.month,
            sunlight=row.sunlight,
            humidity=row.humidity,
            precip=row.precip,
            temperature=row.temperature,
        )
        for row in sorted(rows, key=lambda r: (r.year, r.month))
    ]
    if monthly:
        temps = [denormalize_temperature(NormalizedPercent(m.temperature)) for m in monthly]
        annual_temp_avg = round(sum(temps) / len(temps), 1)
        annual_precip = round(sum(denormalize_precipitation(NormalizedPercent(m.precip)) for m in monthly), 1)
    else:
        annual_temp_avg = 0.0
        annual_precip = 0.0

    return PlantFitContext(
        plant_name=plant_name,
        location=FitLocation(lat=plan.latitude or 0.0, lon=plan.longitude or 0.0),
        orientation=plan.orientation,
        climate=FitClimate(annual_temp_avg=annual_temp_avg, annual_precip=annual_precip),
        cell=FitCell(x=x, y=y),
        weather_monthly=monthly,
    )


def _search_response_format() -> dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "plant_search_response",
            "strict": True,
            "schema": {
                "type": "object",
                "properties": {
                    "candidates": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "name": {"type": "string"},
                                "latin_name": {"type": "string"},
                                "source": {"type": "string", "enum": ["ai"]},
                            },
                            "required": ["name", "latin_name", "source"],
                            "additionalProperties": False,
                        },
                        "maxItems": 5,
                    }
                },
                "required": ["candidates"],
                "additionalProperties": False,
            },
        },
    }


def _fit_response_format() -> dict[str, Any]:
    score = {"type": "integer", "minimum": 1, "maximum": 5}
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "plant_fit_response",
            "strict": True,
            "schema": {
                "type": "object",
                "properties": {
                    "sunlight_score": score,
                    "humidity_score": score,
                    "precip_score": score,
                    "overall_score": score,
                    "explanation": {"type": "string"},
                },
                "required": ["sunlight_score", "humidity_score", "precip_score", "overall_score", "explanation"],
                "additionalProperties": False,
            },
        },
    }


def _fit_user_prompt(context: PlantFitContext) -> str:
    if context.weather_monthly:
        monthly_lines = "\n".join(
            f"- Month {m.month}: temp {denormalize_temperature(NormalizedPercent(m.temperature)):.1f}C, "
            f"sun {m.sunlight}/100, humidity {m.humidity}/100, precipitation {m.precip}/100"
            for m in context.weather_monthly
        )
    else:
        monthly_lines = "No monthly data available"

    lat, lon = context.location.lat, context.location.lon
    return (
        f'Score how well the plant "{context.plant_name}" fits these conditions:\n\n'
        "LOCATION:\n"
        f"- Latitude: {abs(lat)}{'N' if lat >= 0 else 'S'}\n"
        f"- Longitude: {abs(lon)}{'E' if lon >= 0 else 'W'}\n"
        f"- Plot orientation: {context.orientation} degrees (0 = north)\n\n"
        "ANNUAL CLIMATE:\n"
        f"- Mean temperature: {context.climate.annual_temp_avg}C\n"
        f"- Yearly precipitation: {context.climate.annual_precip}mm\n\n"
        "POSITION ON PLOT:\n"
        f"- Cell: ({context.cell.x + 1}, {context.cell.y + 1})\n\n"
        "MONTHLY DATA (averages):\n"
        f"{monthly_lines}\n\n"
        "Score the plant's fit for these conditions."
    )


class OpenRouterGateway:
    """Chat-completions client with one timeout budget and a single retry."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        search_model: Optional[str] = None,
        fit_model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self.base_url = (base_url or settings.openrouter_base_url).rstrip("/")
        self.search_model = search_model or settings.openrouter_search_model
        self.fit_model = fit_model or settings.openrouter_fit_model
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.ai_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.ai_max_retries
        self.retry_backoff_seconds = (
            retry_backoff_seconds if retry_backoff_seconds is not None else settings.ai_retry_backoff_seconds
        )
        self._sleep = sleep
        self._validate_config()

    def _validate_config(self) -> None:
        if not self.api_key:
            raise ValueError("OpenRouter API key must not be empty")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if not self.search_model or not self.fit_model:
            raise ValueError("search and fit models must be configured")

    async def search(self, query: str) -> PlantSearchResult:
        sanitized = sanitize_user_input(query)
        if len(sanitized) < 2:
            raise ValueError("Query must be at least 2 characters long")

        messages = [
            {"role": "system", "content": SEARCH_SYSTEM_PROMPT},
            {"role": "user", "content": f'The user typed: "{sanitized}"\n\nFind the best matching garden plants.'},
        ]

        async def attempt() -> PlantSearchResult:
            content = await self._create_completion(self.search_model, messages, _search_response_format(), "search")
            result = self._validate(content, PlantSearchResult, "search")
            for candidate in result.candidates:
                candidate.name = sanitize_user_input(candidate.name)
                if candidate.latin_name is not None:
                    candidate.latin_name = sanitize_user_input(candidate.latin_name)
            return result

        return await self._execute_with_retry(attempt, "search")

    async def check_fit(self, context: PlantFitContext) -> PlantFitResult:
        messages = [
            {"role": "system", "content": FIT_SYSTEM_PROMPT},
            {"role": "user", "content": _fit_user_prompt(context)},
        ]

        async def attempt() -> PlantFitResult:
            content = await self._create_completion(self.fit_model, messages, _fit_response_format(), "fit")
            return self._validate(content, PlantFitResult, "fit")

        return await self._execute_with_retry(attempt, "fit")

    async def _execute_with_retry(self, operation: Callable[[], Awaitable[T]], context: AIContext) -> T:
        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                return await operation()
            except AIRequestFailed as exc:
                error = exc.error
                # bad_json and rate_limit are terminal.
                if error.type in ("bad_json", "rate_limit") or attempt + 1 >= attempts:
                    logger.warning("AI %s failed (%s): %s", context, error.type, error.details or error.message)
                    raise
                delay = self.retry_backoff_seconds * (2**attempt)
                logger.info("Retrying AI %s after %s (attempt %d/%d)", context, error.type, attempt + 2, attempts)
                await self._sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _create_completion(
        self,
        model: str,
        messages: list[dict[str, str]],
        response_format: dict[str, Any],
        context: AIContext,
    ) -> Any:
        payload = {
            "model": model,
            "messages": messages,
            "response_format": response_format,
            "temperature": settings.ai_temperature,
            "top_p": settings.ai_top_p,
            "max_tokens": settings.ai_max_tokens,
        }
        try:
            return await asyncio.wait_for(self._post(payload, context), timeout=self.timeout_seconds)
        except AIRequestFailed:
            raise
        except Exception as exc:
            raise AIRequestFailed(to_ai_error(exc, context)) from exc

    async def _post(self, payload: dict[str, Any], context: AIContext) -> Any:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": settings.openrouter_site_url,
            "X-Title": settings.openrouter_app_name,
        }
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.post(f"{self.base_url}/chat/completions", json=payload, headers=headers)

        if response.status_code == 429:
            raise AIRequestFailed(
                create_ai_error("rate_limit", context, retry_after=self._retry_after(response))
            )
        if response.status_code >= 400:
            logger.warning("OpenRouter error response: %s %s", response.status_code, response.text[:500])
            details = f"OpenRouter API error ({response.status_code})"
            if response.text:
                details = f"{details}: {response.text[:500]}"
            raise AIRequestFailed(create_ai_error("unknown", context, details=details))

        try:
            body = response.json()
            return body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise AIRequestFailed(
                create_ai_error("bad_json", context, details=f"Unexpected completion envelope: {exc}")
            ) from exc

    @staticmethod
    def _retry_after(response: httpx.Response) -> int:
        try:
            return max(1, int(response.headers.get("Retry-After", "60")))
        except ValueError:
            return 60

    @staticmethod
    def _validate(content: Any, model: type[T], context: AIContext) -> T:
        try:
            data = json.loads(content) if isinstance(content, str) else content
            return model.model_validate(data)
        except (ValueError, ValidationError) as exc:
            raise AIRequestFailed(create_ai_error("bad_json", context, details=str(exc))) from exc


__all__ = ["OpenRouterGateway", "build_fit_context", "sanitize_user_input"]
