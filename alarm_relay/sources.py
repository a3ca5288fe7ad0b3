"""
Acesso de leitura ao banco de alarmes (MySQL) via SQLAlchemy.

As consultas usam SQL textual sobre as tabelas existentes; nada aqui escreve no banco.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import DateTime, bindparam, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .constants import (
    ALERT_ACTIVE_WINDOW_MINUTES,
    DATABASE_TIMEOUT_SECONDS,
    RULE_STATUS_ACTIVE,
)
from .exceptions import SourceUnavailable
from .models import AlertRecord, RuleDefinition

logger = logging.getLogger(__name__)

ACTIVE_ALERTS_SQL = text(
    "SELECT * FROM fm_alarminfo AS fa WHERE fa.fm_latelytime >= :cutoff"
).bindparams(bindparam("cutoff", type_=DateTime))

ACTIVE_RULES_SQL = text(
    """
    SELECT
        rfmd.domain_id AS domain_id,
        rfmd.domain_name AS domain,
        rfmr.id AS rule_id,
        rfmi.item_code AS rule_code,
        rfmi.item_name AS rule_name,
        rfmr.threshold_high AS threshold_high,
        rfmr.threshold_low AS threshold_low,
        rfmr.unit AS unit,
        rfmr.attention_threshold AS attention_threshold,
        rfmr.ci_id AS ci_id,
        rfmr.notify_mail AS notify_mail,
        rfmr.res_code AS response_code,
        rfmr.diff_type AS diff_type
    FROM
        real_flux_monitor_rule rfmr
        LEFT JOIN real_flux_monitor_item rfmi ON rfmr.item_id = rfmi.item_code
        LEFT JOIN real_flux_monitor_domain rfmd ON rfmr.id = rfmd.rule_id
    WHERE rfmr.status = :status
    """
)


def _convert_rows(rows, convert):
    """Converte linha a linha; uma linha inválida é descartada sem perder as demais."""
    results = []
    for row in rows:
        try:
            results.append(convert(row))
        except (ValueError, TypeError) as e:
            logger.warning(f"Linha ignorada, conversão falhou ({e}): {dict(row)}")
    return results


def create_db_engine(dsn: str, timeout: int = DATABASE_TIMEOUT_SECONDS) -> Engine:
    """
    Cria o engine e valida a conexão. Falha aqui é fatal para o processo
    (o chamador decide como encerrar).
    """
    connect_args = {}
    if dsn.startswith("mysql"):
        connect_args = {"connect_timeout": timeout, "read_timeout": timeout}
    engine = create_engine(dsn, pool_pre_ping=True, pool_recycle=3600, connect_args=connect_args)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        engine.dispose()
        raise SourceUnavailable(f"Falha ao conectar no banco: {e}") from e
    return engine


class AlertSource:
    def __init__(self, engine: Engine, window_minutes: int = ALERT_ACTIVE_WINDOW_MINUTES):
        self.engine = engine
        self.window = timedelta(minutes=window_minutes)

    def fetch_active(self, now: Optional[datetime] = None) -> List[AlertRecord]:
        """Alarmes com fm_latelytime dentro da janela (últimos 20 minutos por padrão)."""
        cutoff = (now or datetime.now()) - self.window
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(ACTIVE_ALERTS_SQL, {"cutoff": cutoff}).mappings().all()
        except SQLAlchemyError as e:
            raise SourceUnavailable(f"Query alerting err: {e}") from e
        return _convert_rows(rows, AlertRecord.from_row)


class RuleSource:
    def __init__(self, engine: Engine, status: int = RULE_STATUS_ACTIVE):
        self.engine = engine
        self.status = status

    def fetch_active(self) -> List[RuleDefinition]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(ACTIVE_RULES_SQL, {"status": self.status}).mappings().all()
        except SQLAlchemyError as e:
            raise SourceUnavailable(f"Query alerting rule err: {e}") from e
        return _convert_rows(rows, RuleDefinition.from_row)
