import contextlib
import json
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Union

logger = logging.getLogger(__name__)


class AlertStore:
    """
    Registo persistente do último alerta enviado por competição
    (epoch em milissegundos), guardado num único ficheiro JSON.
    """

    def __init__(self, path: Union[str, Path] = "./lastAlerts.json"):
        self.path = Path(path)

    def load(self) -> Dict[str, int]:
        if not self.path.exists():
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(
                f"Erro ao ler ficheiro de alertas {self.path}: {e}",
                extra={"phase": "load", "cause": str(e)},
            )
            return {}

        if not isinstance(data, dict):
            logger.error(
                f"Ficheiro de alertas {self.path} não contém um objeto JSON, a ignorar.",
                extra={"phase": "load", "cause": type(data).__name__},
            )
            return {}

        alerts: Dict[str, int] = {}
        for competition, ts in data.items():
            if isinstance(ts, bool) or not isinstance(ts, (int, float)) or (
                isinstance(ts, float) and not math.isfinite(ts)
            ):
                logger.warning(
                    f"Timestamp inválido para {competition!r}: {ts!r}, a ignorar.",
                    extra={"competition": competition, "phase": "load"},
                )
                continue
            alerts[competition] = int(ts)
        return alerts

    def save(self, alerts: Mapping[str, int]) -> bool:
        # Escreve num ficheiro temporário e troca no fim, o original fica intacto se falhar
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = f.name
                json.dump(dict(alerts), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.remove(tmp_path)
            logger.error(
                f"Erro ao guardar ficheiro de alertas {self.path}: {e}",
                extra={"phase": "persist", "cause": str(e)},
            )
            return False


def is_in_cooldown(
    last_alerts: Mapping[str, int],
    competition: str,
    now_ms: int,
    cooldown_ms: int,
) -> bool:
    """True se já houve alerta para a competição há menos de `cooldown_ms`."""
    last = last_alerts.get(competition)
    if last is None:
        return False
    return now_ms - last < cooldown_ms
