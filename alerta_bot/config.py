import os
from typing import Tuple

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

API_FOOTBALL_HOST = "v3.football.api-sports.io"
API_FOOTBALL_BASE_URL = f"https://{API_FOOTBALL_HOST}"
TELEGRAM_API_URL = "https://api.telegram.org"

# Competições monitorizadas (match por substring, sem distinguir maiúsculas)
COMPETITIONS_TO_MONITOR: Tuple[str, ...] = (
    "Brasileirao Serie A",
    "Serie A",
    "Euro Championship",
    "Copa America",
    "Copa Libertadores",
    "Leagues Cup",
)

CHECK_INTERVAL_SECONDS = int(os.getenv("CHECK_INTERVAL_SECONDS", "120"))  # 2 minutos
SEQUENCE_LENGTH = int(os.getenv("SEQUENCE_LENGTH", "6"))
HOURS_BETWEEN_ALERTS = float(os.getenv("HOURS_BETWEEN_ALERTS", "6"))
LOOKBACK_MONTHS = int(os.getenv("LOOKBACK_MONTHS", "2"))
LAST_ALERTS_FILE = os.getenv("LAST_ALERTS_FILE", "./lastAlerts.json")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "20"))

PORT = int(os.getenv("PORT", "10000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """
    Configuração do bot, construída uma única vez no arranque e passada
    explicitamente ao scheduler e às chamadas HTTP.

    Os segredos não são validados: se faltarem, as chamadas externas falham
    e ficam registadas no log.
    """

    telegram_token: str = ""
    telegram_chat_id: str = ""
    api_football_key: str = ""

    api_football_base_url: str = API_FOOTBALL_BASE_URL
    telegram_api_url: str = TELEGRAM_API_URL

    competitions: Tuple[str, ...] = COMPETITIONS_TO_MONITOR
    check_interval_seconds: float = CHECK_INTERVAL_SECONDS
    sequence_length: int = SEQUENCE_LENGTH
    hours_between_alerts: float = HOURS_BETWEEN_ALERTS
    lookback_months: int = LOOKBACK_MONTHS
    last_alerts_file: str = LAST_ALERTS_FILE
    http_timeout_seconds: float = HTTP_TIMEOUT_SECONDS
    scheduler_enabled: bool = True

    @property
    def cooldown_ms(self) -> int:
        return int(self.hours_between_alerts * 3600 * 1000)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            telegram_token=os.getenv("ALERTA_TOKEN", ""),
            telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID", ""),
            api_football_key=os.getenv("API_FOOTBALL_KEY", ""),
            scheduler_enabled=_env_flag("SCHEDULER_ENABLED"),
        )
