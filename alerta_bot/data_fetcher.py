import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from alerta_bot.config import Settings
from alerta_bot.model import Match

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    matches: List[Match] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def months_before(day: date, months: int) -> date:
    # Dia limitado ao último dia do mês de destino (31/03 - 1 mês -> 28/02)
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def lookback_window(today: date, months: int = 2) -> Tuple[str, str]:
    return months_before(today, months).isoformat(), today.isoformat()


def _parse_date(raw: Any) -> Optional[datetime]:
    if not isinstance(raw, str):
        return None
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _section(fx: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = fx.get(key)
    return value if isinstance(value, dict) else {}


def _goal(raw: Any) -> Optional[int]:
    if isinstance(raw, bool) or not isinstance(raw, int):
        return None
    return raw


def parse_fixtures(payload: Any, competitions: Sequence[str]) -> List[Match]:
    """
    Normaliza a resposta de /fixtures numa lista de Match, mantendo só as
    competições monitorizadas.
    """
    if not isinstance(payload, dict):
        logger.warning("Resposta da API não é um objeto JSON, sem jogos.")
        return []

    errors = payload.get("errors")
    if errors:
        logger.warning(f"API-Football devolveu erros: {errors}", extra={"phase": "fetch", "cause": str(errors)})

    fixtures = payload.get("response")
    if not isinstance(fixtures, list):
        logger.warning("Resposta da API sem lista 'response', sem jogos.")
        return []

    wanted = [c.lower() for c in competitions]
    matches: List[Match] = []
    for fx in fixtures:
        if not isinstance(fx, dict):
            continue
        league_name = _section(fx, "league").get("name")
        if not isinstance(league_name, str):
            logger.debug(f"Fixture sem nome de liga ignorado: {fx.get('fixture')}")
            continue
        if not any(c in league_name.lower() for c in wanted):
            continue

        fixture_date = _parse_date(_section(fx, "fixture").get("date"))
        if fixture_date is None:
            logger.debug(f"Fixture sem data válida ignorado ({league_name})")
            continue

        goals = _section(fx, "goals")
        matches.append(
            Match(
                competition=league_name,
                date=fixture_date,
                home_goals=_goal(goals.get("home")),
                away_goals=_goal(goals.get("away")),
            )
        )
    return matches


async def fetch_recent_fixtures(
    settings: Settings,
    today: Optional[date] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FetchResult:
    """
    Vai buscar os jogos dos últimos `lookback_months` meses (até hoje, UTC)
    e devolve os das competições monitorizadas.
    """
    today = today or datetime.now(timezone.utc).date()
    date_from, date_to = lookback_window(today, settings.lookback_months)

    headers = {"x-apisports-key": settings.api_football_key}
    try:
        async with httpx.AsyncClient(
            base_url=settings.api_football_base_url,
            headers=headers,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        ) as client:
            r = await client.get("/fixtures", params={"from": date_from, "to": date_to})
            r.raise_for_status()
            data: Dict[str, Any] = r.json()
    except httpx.HTTPError as e:
        return FetchResult(error=f"{type(e).__name__}: {e}")
    except ValueError as e:
        return FetchResult(error=f"JSON inválido: {e}")

    matches = parse_fixtures(data, settings.competitions)
    logger.info(f"{len(matches)} jogos recebidos entre {date_from} e {date_to}")
    return FetchResult(matches=matches)
