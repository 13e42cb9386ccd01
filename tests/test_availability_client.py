from __future__ import annotations

import asyncio
from datetime import date
from typing import Any

import httpx
import pytest

from rental_availability.services import AvailabilityClient, AvailabilityFetchError

REFERENCE = date(2025, 6, 1)


def _item(**overrides: Any) -> dict[str, Any]:
    item: dict[str, Any] = {
        "availabilityId": "a-dolphin-cove-2-bedroom-0",
        "account": "A",
        "resort": "Dolphin Cove",
        "unitType": "2 bedroom",
        "dateRange": "9/23-9/26",
        "nights": 3,
        "cost": "$366.60",
        "minStayDays": 2,
        "photo": "https://example.com/photo.jpg",
        "link": "https://airbnb.com/HM1-dolphin-cove",
    }
    item.update(overrides)
    return item


def _client(handler) -> AvailabilityClient:
    return AvailabilityClient(
        base_url="http://backend.test",
        reference_date=REFERENCE,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_parses_records_and_skips_invalid_items():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/availability"
        return httpx.Response(
            200,
            json=[
                _item(),
                _item(startDate="2025-12-28", endDate="2026-01-03", dateRange="12/28-1/3"),
                _item(resort=""),
                _item(dateRange="sometime"),
                "not an object",
            ],
        )

    async with _client(handler) as client:
        records = await client.fetch()

    assert len(records) == 2
    first, second = records
    assert first.start == date(2025, 9, 23)
    assert first.end == date(2025, 9, 26)
    assert first.unit_type == "2 bedroom"
    assert first.min_stay_days == 2
    assert first.base_nights == 3
    assert second.end == date(2026, 1, 3)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "Server Error", "detail": "sheet down", "stack": "..."}),
        httpx.Response(404, text="not found"),
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json={"rows": []}),
    ],
)
async def test_fetch_raises_on_bad_responses(response):
    async with _client(lambda request: response) as client:
        with pytest.raises(AvailabilityFetchError):
            await client.fetch()


@pytest.mark.asyncio
async def test_fetch_error_carries_status_and_detail():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Server Error", "detail": "sheet down", "stack": "..."})

    async with _client(handler) as client:
        with pytest.raises(AvailabilityFetchError, match="sheet down") as excinfo:
            await client.fetch()
    assert excinfo.value.status == 500


@pytest.mark.asyncio
async def test_refresh_reports_transport_errors_without_raising():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        result = await client.refresh()

    assert result.ok is False
    assert result.records == []
    assert "connection refused" in result.error


@pytest.mark.asyncio
async def test_refresh_replaces_last_payload_and_keeps_it_on_failure():
    responses = [
        httpx.Response(200, json=[_item()]),
        httpx.Response(200, json=[_item(), _item(resort="Yellowstone")]),
        httpx.Response(503, text="unavailable"),
    ]

    async with _client(lambda request: responses.pop(0)) as client:
        first = await client.refresh()
        second = await client.refresh()
        failed = await client.refresh()

        assert first.ok and len(first.records) == 1
        assert second.ok and len(second.records) == 2
        assert failed.error is not None
        assert [record.resort for record in client.last_records] == ["Dolphin Cove", "Yellowstone"]


@pytest.mark.asyncio
async def test_stale_refresh_does_not_overwrite_newer_payload():
    slow_release = asyncio.Event()
    calls = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            await slow_release.wait()
            return httpx.Response(200, json=[_item(resort="Old Resort")])
        return httpx.Response(200, json=[_item(resort="New Resort")])

    async with _client(handler) as client:
        slow = asyncio.create_task(client.refresh())
        while calls == 0:
            await asyncio.sleep(0)
        fresh = await client.refresh()
        slow_release.set()
        stale = await slow

        assert fresh.ok
        assert stale.stale is True
        assert [record.resort for record in stale.records] == ["New Resort"]
        assert [record.resort for record in client.last_records] == ["New Resort"]


@pytest.mark.asyncio
async def test_items_without_ids_get_positional_ids():
    def handler(request: httpx.Request) -> httpx.Response:
        items = [_item(), _item(resort="Yellowstone", unitType="3 bedroom")]
        for item in items:
            del item["availabilityId"]
        return httpx.Response(200, json=items)

    async with _client(handler) as client:
        records = await client.fetch()

    assert [record.availability_id for record in records] == [
        "a-dolphin-cove-2-bedroom-0",
        "a-yellowstone-3-bedroom-1",
    ]
    assert records[1].source_ids == ("a-yellowstone-3-bedroom-1",)
