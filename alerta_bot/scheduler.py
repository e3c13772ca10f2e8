import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from alerta_bot.alert_store import AlertStore, is_in_cooldown
from alerta_bot.config import Settings
from alerta_bot.data_fetcher import fetch_recent_fixtures
from alerta_bot.model import Match, has_low_scoring_sequence, matches_for_competition
from alerta_bot.telegram_notifier import format_alert_message, send_telegram_message

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    alerted: List[str] = field(default_factory=list)
    suppressed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def _now_ms() -> int:
    return int(time.time() * 1000)


class AlertScheduler:
    def __init__(self, settings: Settings, store: Optional[AlertStore] = None):
        self.settings = settings
        self.store = store or AlertStore(settings.last_alerts_file)
        self.last_alerts: Optional[Dict[str, int]] = None
        self._cycle_task: Optional[asyncio.Task] = None
        self._stopping = False

    def _log_failure(self, competition: Optional[str], phase: str, cause: str):
        logger.error(
            f"[{phase}] {competition or '-'}: {cause}",
            extra={"competition": competition, "phase": phase, "cause": cause},
        )

    async def check_all_competitions(self, now_ms: Optional[int] = None) -> CycleReport:
        """Um ciclo completo: fetch, filtro, deteção, cooldown, envio e persistência."""
        logger.info("A verificar jogos...")
        report = CycleReport()

        if self.last_alerts is None:
            self.last_alerts = self.store.load()

        result = await fetch_recent_fixtures(self.settings)
        if not result.ok:
            self._log_failure(None, "fetch", result.error)
            report.errors.append("fetch")
            return report

        for competition in self.settings.competitions:
            try:
                await self.check_competition(competition, result.matches, report, now_ms)
            except Exception as e:
                self._log_failure(competition, "evaluate", repr(e))
                report.errors.append(competition)
        return report

    async def check_competition(
        self,
        competition: str,
        all_matches: List[Match],
        report: CycleReport,
        now_ms: Optional[int] = None,
    ):
        matches = matches_for_competition(all_matches, competition)
        if not matches:
            return

        if not has_low_scoring_sequence(matches, self.settings.sequence_length):
            return

        now = now_ms if now_ms is not None else _now_ms()
        if is_in_cooldown(self.last_alerts, competition, now, self.settings.cooldown_ms):
            logger.info(f"Já alertado recentemente ({competition}), a ignorar...")
            report.suppressed.append(competition)
            return

        msg = format_alert_message(competition, self.settings.sequence_length)
        logger.info(msg)
        sent = await send_telegram_message(self.settings, msg)
        if not sent.ok:
            self._log_failure(competition, "notify", sent.error)
            report.errors.append(competition)
            return

        report.alerted.append(competition)
        self.last_alerts[competition] = now
        if not self.store.save(self.last_alerts):
            # O estado em memória avança na mesma; após um restart pode repetir o alerta
            self._log_failure(competition, "persist", f"não foi possível gravar {self.store.path}")

    @property
    def in_flight(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    def tick(self) -> bool:
        """Arranca um ciclo em background, a não ser que o anterior ainda esteja a correr."""
        if self.in_flight:
            logger.warning("Ciclo anterior ainda em curso, tick ignorado.")
            return False
        self._cycle_task = asyncio.create_task(self._guarded_cycle())
        return True

    async def _guarded_cycle(self):
        try:
            await self.check_all_competitions()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._log_failure(None, "cycle", repr(e))

    async def run(self):
        logger.info(
            f"A monitorizar {len(self.settings.competitions)} competições a cada "
            f"{self.settings.check_interval_seconds:.0f}s (sequência de {self.settings.sequence_length})."
        )
        self._stopping = False
        try:
            while not self._stopping:
                self.tick()
                await asyncio.sleep(self.settings.check_interval_seconds)
        finally:
            await self._cancel_cycle()

    async def stop(self):
        self._stopping = True
        await self._cancel_cycle()

    async def _cancel_cycle(self):
        task = self._cycle_task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
