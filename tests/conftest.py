from datetime import datetime, timedelta, timezone

import pytest

from alerta_bot.alert_store import AlertStore
from alerta_bot.config import Settings
from alerta_bot.model import Match

BASE_DATE = datetime(2024, 6, 30, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path):
    """Settings isolados: ficheiro de alertas temporário, sem segredos reais."""
    return Settings(
        telegram_token="test-token",
        telegram_chat_id="12345",
        api_football_key="test-key",
        last_alerts_file=str(tmp_path / "lastAlerts.json"),
        check_interval_seconds=0.01,
        http_timeout_seconds=1,
    )


@pytest.fixture
def store(settings):
    return AlertStore(settings.last_alerts_file)


def make_matches(scores, competition="Serie A", start=BASE_DATE):
    """Lista de Match do mais recente para o mais antigo, um dia de intervalo."""
    return [
        Match(competition=competition, date=start - timedelta(days=i), home_goals=h, away_goals=a)
        for i, (h, a) in enumerate(scores)
    ]
