from dataclasses import dataclass
from typing import Optional

import httpx

from alerta_bot.config import Settings


@dataclass
class SendResult:
    ok: bool
    error: Optional[str] = None


async def send_telegram_message(
    settings: Settings,
    message: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SendResult:
    """
    Envia uma mensagem para o chat do Telegram configurado.
    O corpo da resposta não é usado, só o status.
    """
    url = f"{settings.telegram_api_url}/bot{settings.telegram_token}/sendMessage"
    payload = {
        "chat_id": settings.telegram_chat_id,
        "text": message,
    }

    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=transport) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            return SendResult(ok=True)
    except httpx.HTTPStatusError as e:
        # A mensagem do httpx inclui o URL, que contém o token do bot
        return SendResult(ok=False, error=f"HTTP {e.response.status_code}")
    except httpx.HTTPError as e:
        return SendResult(ok=False, error=type(e).__name__)


def format_alert_message(competition: str, sequence_length: int) -> str:
    return f"🚨 Alerta: {sequence_length} jogos seguidos com menos de 2 gols em {competition}!"
