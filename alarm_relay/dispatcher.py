import logging
import threading
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence

from .compiler import compile_notification
from .constants import ALERTMANAGER_WEBHOOK_URL, SCAN_INTERVAL_SECONDS
from .exceptions import DeliveryFailure, NotificationRejected, SourceUnavailable
from .models import CompiledNotification
from .resolver import build_rule_map, resolve
from .services import send_alertmanager_payload

logger = logging.getLogger(__name__)

Sink = Callable[[Sequence[CompiledNotification]], object]


@dataclass
class CycleResult:
    alerts: int = 0
    rules: int = 0
    compiled: int = 0
    rejected: int = 0
    delivered: bool = False


class DispatchCycle:
    """
    Uma varredura: alarmes -> regras -> mensagens -> Alertmanager.

    Não guarda estado entre execuções; o mapa de regras é refeito a cada ciclo.
    Falhas de um alarme só descartam aquele alarme, falhas de consulta ou de
    envio encerram o ciclo. Nada é reenviado.
    """

    def __init__(self, alert_source, rule_source, sink: Optional[Sink] = None, webhook_url: str = ALERTMANAGER_WEBHOOK_URL):
        self.alert_source = alert_source
        self.rule_source = rule_source
        self.sink = sink or partial(send_alertmanager_payload, webhook_url)

    def compile_batch(self, alerts, rules) -> List[CompiledNotification]:
        rule_map = build_rule_map(rules)
        batch: List[CompiledNotification] = []
        for rule, alert in resolve(alerts, rule_map):
            try:
                batch.append(compile_notification(rule, alert))
            except NotificationRejected as e:
                logger.warning(str(e))
        return batch

    def run_once(self) -> CycleResult:
        result = CycleResult()

        try:
            alerts = self.alert_source.fetch_active()
        except SourceUnavailable as e:
            logger.error(str(e))
            return result
        result.alerts = len(alerts)
        if not alerts:
            logger.debug("Nenhum alarme ativo na janela, ciclo encerrado")
            return result

        try:
            rules = self.rule_source.fetch_active()
        except SourceUnavailable as e:
            logger.error(str(e))
            return result
        result.rules = len(rules)
        if not rules:
            logger.warning("Nenhuma regra ativa encontrada, ciclo encerrado")
            return result

        batch = self.compile_batch(alerts, rules)
        result.compiled = len(batch)
        result.rejected = result.alerts - result.compiled
        if not batch:
            return result

        try:
            self.sink(batch)
        except DeliveryFailure as e:
            logger.error(f"{e} ({len(batch)} alertas descartados)")
            return result

        result.delivered = True
        logger.info(f"Request return OK ({len(batch)} alertas enviados)")
        return result


class IntervalScheduler(threading.Thread):
    """Executa `job` uma vez ao iniciar e depois a cada `interval` segundos até stop()."""

    def __init__(self, job: Callable[[], object], interval: float = SCAN_INTERVAL_SECONDS, name: str = "alarm-scanner"):
        super().__init__(daemon=True, name=name)
        self.job = job
        self.interval = interval
        self._stop_event = threading.Event()

    def stop(self):
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self):
        logger.info(f"Scheduler '{self.name}' iniciado (intervalo={self.interval}s)")
        while not self._stop_event.is_set():
            try:
                self.job()
            except Exception:
                # um ciclo com erro inesperado não derruba o worker
                logger.exception("Erro inesperado no ciclo de varredura")
            self._stop_event.wait(self.interval)
        logger.info(f"Scheduler '{self.name}' finalizado")
