"""Tests for the canned AI gateway used when AI_USE_MOCK is on."""

import pytest

from plotplanner.services.ai_mock import MockAIGateway


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", "a", "<>"])
async def test_mock_search_rejects_short_queries(query):
    with pytest.raises(ValueError, match="at least 2 characters"):
        await MockAIGateway(delay_seconds=0).search(query)


@pytest.mark.asyncio
async def test_mock_search_matches_known_plants():
    result = await MockAIGateway(delay_seconds=0).search("  Rose ")

    assert [c.latin_name for c in result.candidates] == ["Rosa x hybrida", "Rosa multiflora"]


@pytest.mark.asyncio
async def test_mock_search_unknown_plant_has_no_candidates():
    result = await MockAIGateway(delay_seconds=0).search("mandrake")

    assert result.candidates == []
