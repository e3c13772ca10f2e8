from datetime import date, datetime, timezone

import httpx
import pytest

from alerta_bot.data_fetcher import fetch_recent_fixtures, lookback_window, months_before, parse_fixtures

COMPETITIONS = ("Serie A", "Copa America")


def fixture(league, when, home, away):
    return {
        "fixture": {"id": 1, "date": when},
        "league": {"name": league},
        "goals": {"home": home, "away": away},
    }


def test_lookback_window_two_months():
    assert lookback_window(date(2024, 6, 15)) == ("2024-04-15", "2024-06-15")


def test_months_before_clamps_day_and_crosses_year():
    assert months_before(date(2024, 4, 30), 2) == date(2024, 2, 29)
    assert months_before(date(2024, 1, 31), 2) == date(2023, 11, 30)


def test_parse_fixtures_keeps_watched_competitions():
    payload = {
        "response": [
            fixture("Serie A", "2024-05-12T18:45:00+00:00", 1, 0),
            fixture("Premier League", "2024-05-12T15:00:00+00:00", 0, 0),
            fixture("Copa America", "2024-06-20T00:00:00+00:00", None, None),
        ]
    }

    matches = parse_fixtures(payload, COMPETITIONS)

    assert [m.competition for m in matches] == ["Serie A", "Copa America"]
    assert matches[0].date == datetime(2024, 5, 12, 18, 45, tzinfo=timezone.utc)
    assert matches[0].home_goals == 1 and matches[0].away_goals == 0
    assert matches[1].home_goals is None and matches[1].away_goals is None


def test_parse_fixtures_skips_broken_entries():
    payload = {
        "response": [
            {"league": None, "fixture": {"date": "2024-05-12T18:45:00+00:00"}},
            fixture("Serie A", "not a date", 0, 0),
            "garbage",
            fixture("Serie A", "2024-05-12T18:45:00", 0, 0),
        ]
    }

    matches = parse_fixtures(payload, COMPETITIONS)

    assert len(matches) == 1
    assert matches[0].date.tzinfo is not None


@pytest.mark.parametrize("payload", [None, [], {"errors": {"token": "invalid"}}, {"response": "nope"}])
def test_parse_fixtures_degrades_to_empty(payload):
    assert parse_fixtures(payload, COMPETITIONS) == []


@pytest.mark.asyncio
async def test_fetch_recent_fixtures_request(settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["request"] = request
        return httpx.Response(200, json={"response": [fixture("Serie A", "2024-05-12T18:45:00+00:00", 0, 0)]})

    result = await fetch_recent_fixtures(settings, today=date(2024, 6, 15), transport=httpx.MockTransport(handler))

    assert result.ok
    assert len(result.matches) == 1
    request = seen["request"]
    assert request.url.path == "/fixtures"
    assert request.url.params["from"] == "2024-04-15"
    assert request.url.params["to"] == "2024-06-15"
    assert request.headers["x-apisports-key"] == "test-key"


@pytest.mark.asyncio
async def test_fetch_recent_fixtures_http_error(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))

    result = await fetch_recent_fixtures(settings, today=date(2024, 6, 15), transport=transport)

    assert not result.ok
    assert result.matches == []


@pytest.mark.asyncio
async def test_fetch_recent_fixtures_network_error(settings):
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    result = await fetch_recent_fixtures(settings, transport=httpx.MockTransport(handler))

    assert not result.ok
    assert "ConnectError" in result.error


@pytest.mark.asyncio
async def test_fetch_recent_fixtures_invalid_json(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))

    result = await fetch_recent_fixtures(settings, transport=transport)

    assert not result.ok
