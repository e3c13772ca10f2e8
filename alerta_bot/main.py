import asyncio
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from alerta_bot.config import LOG_FILE, LOG_LEVEL, PORT, Settings
from alerta_bot.scheduler import AlertScheduler

logger = logging.getLogger(__name__)


CONTEXT_FIELDS = ("competition", "phase", "cause")


class ContextFilter(logging.Filter):
    """Junta os campos `extra` (competition, phase, cause) ao fim da linha de log."""

    def filter(self, record: logging.LogRecord) -> bool:
        parts = []
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                parts.append(f"{name}={value}")
        record.context = f" [{' '.join(parts)}]" if parts else ""
        return True


def configure_logging(level: str = LOG_LEVEL, log_file: str = LOG_FILE):
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.addFilter(ContextFilter())

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s%(context)s",
        handlers=handlers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Arranca o scheduler com o servidor web e pára-o no shutdown."""
    settings = Settings.from_env()
    app.state.settings = settings
    app.state.scheduler = None
    run_task = None

    if settings.scheduler_enabled:
        scheduler = AlertScheduler(settings)
        app.state.scheduler = scheduler
        run_task = asyncio.create_task(scheduler.run())

    try:
        yield
    finally:
        if run_task is not None:
            await app.state.scheduler.stop()
            run_task.cancel()
            try:
                await run_task
            except asyncio.CancelledError:
                pass
            logger.info("Scheduler parado.")


app = FastAPI(title="Alerta Bot - Sequências com menos de 2 gols", version="1.0.0", lifespan=lifespan)


@app.get("/", response_class=PlainTextResponse)
def root():
    """Keep-alive para o Render."""
    return "Bot ativo e rodando ✅"


def run():
    import uvicorn

    configure_logging()
    logger.info(f"Servidor web ativo na porta {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT, log_config=None)


if __name__ == "__main__":
    run()
