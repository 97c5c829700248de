"""Exercise the OpenRouter gateway against the live provider (or the mock)."""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Union

from plotplanner.core.errors import AIRequestFailed
from plotplanner.core.logging_config import setup_logging
from plotplanner.services.ai_mock import MockAIGateway
from plotplanner.services.ai_schemas import FitCell, FitClimate, FitLocation, PlantFitContext
from plotplanner.services.openrouter import OpenRouterGateway


async def _run(gateway: Union[OpenRouterGateway, MockAIGateway], query: str, fit: bool) -> int:
    try:
        found = await gateway.search(query)
        print(json.dumps(found.model_dump(), indent=2, ensure_ascii=False))
        if not fit or not found.candidates:
            return 0

        context = PlantFitContext(
            plant_name=found.candidates[0].name,
            location=FitLocation(lat=52.23, lon=21.01),
            orientation=180,
            climate=FitClimate(annual_temp_avg=9.1, annual_precip=560.0),
            cell=FitCell(x=0, y=0),
        )
        scores = await gateway.check_fit(context)
        print(json.dumps(scores.model_dump(), indent=2, ensure_ascii=False))
    except AIRequestFailed as exc:
        error = exc.error
        print(f"AI {error.context} failed: {error.type} (can_retry={error.can_retry}) {error.details or ''}")
        return 1
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test AI plant search and fit scoring.")
    parser.add_argument("query", nargs="?", default="tomato", help="Plant search query.")
    parser.add_argument("--fit", action="store_true", help="Also score the first candidate for a sample plot.")
    parser.add_argument("--mock", action="store_true", help="Use the canned mock gateway instead of the provider.")
    args = parser.parse_args()

    setup_logging("openrouter-smoke")
    gateway = MockAIGateway(delay_seconds=0) if args.mock else OpenRouterGateway()
    raise SystemExit(asyncio.run(_run(gateway, args.query, args.fit)))


if __name__ == "__main__":
    main()
