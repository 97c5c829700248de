"""Canned AI responses for local development without a provider key."""

from __future__ import annotations

import asyncio
import logging

from plotplanner.services.ai_schemas import (
    PlantFitContext,
    PlantFitResult,
    PlantSearchCandidate,
    PlantSearchResult,
)
from plotplanner.services.openrouter import sanitize_user_input

logger = logging.getLogger(__name__)

MOCK_CANDIDATES: dict[str, list[tuple[str, str]]] = {
    "tomato": [
        ("Tomato", "Solanum lycopersicum"),
        ("Cherry tomato", "Solanum lycopersicum var. cerasiforme"),
    ],
    "cucumber": [("Cucumber", "Cucumis sativus")],
    "carrot": [("Carrot", "Daucus carota")],
    "basil": [
        ("Sweet basil", "Ocimum basilicum"),
        ("Lemon basil", "Ocimum x citriodorum"),
        ("Thai basil", "Ocimum basilicum var. thyrsiflora"),
    ],
    "rose": [
        ("Hybrid tea rose", "Rosa x hybrida"),
        ("Climbing rose", "Rosa multiflora"),
    ],
    "lavender": [("English lavender", "Lavandula angustifolia")],
}


class MockAIGateway:
    """Same interface as ``OpenRouterGateway`` with deterministic answers."""

    def __init__(self, delay_seconds: float = 0.8) -> None:
        self.delay_seconds = delay_seconds

    async def search(self, query: str) -> PlantSearchResult:
        needle = sanitize_user_input(query).lower()
        if len(needle) < 2:
            raise ValueError("Query must be at least 2 characters long")
        await asyncio.sleep(self.delay_seconds)
        matches = [
            PlantSearchCandidate(name=name, latin_name=latin, source="ai")
            for key, plants in MOCK_CANDIDATES.items()
            if key in needle or needle in key
            for name, latin in plants
        ]
        logger.debug("Mock AI search for %r returned %d candidates", query, len(matches))
        return PlantSearchResult(candidates=matches[:5])

    async def check_fit(self, context: PlantFitContext) -> PlantFitResult:
        await asyncio.sleep(self.delay_seconds)
        warm = context.climate.annual_temp_avg >= 8.0
        return PlantFitResult(
            sunlight_score=4 if warm else 3,
            humidity_score=4,
            precip_score=3,
            overall_score=4 if warm else 2,
            explanation=(
                f"Mock assessment for {context.plant_name}: mean temperature "
                f"{context.climate.annual_temp_avg}C and {context.climate.annual_precip}mm of yearly rain."
            ),
        )


__all__ = ["MockAIGateway"]
