"""Registros lidos do banco (fm_alarminfo / real_flux_monitor_rule) e a notificação gerada."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


def _to_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    return int(value)


def _to_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    return float(value)


def _to_str(value: Any) -> str:
    return "" if value is None else str(value)


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    # SQLite devolve texto; PyMySQL devolve datas zeradas (0000-00-00) como texto
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        logger.warning(f"Data inválida ignorada: {value!r}")
        return None


@dataclass(frozen=True)
class AlertRecord:
    id: int
    code: str
    rule_id: int
    threshold_high: float = 0.0
    threshold_low: float = 0.0
    unit: str = ""
    value: float = 0.0
    starts_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total: int = 0
    status: int = 0
    type: int = 0
    customer_id: int = 0
    customer_name: str = ""
    extra: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AlertRecord":
        return cls(
            id=_to_int(row.get("id")),
            type=_to_int(row.get("fm_type")),
            rule_id=_to_int(row.get("fm_ruleid")),
            code=_to_str(row.get("fm_itemcode")),
            threshold_high=_to_float(row.get("fm_thresholdhigh")),
            threshold_low=_to_float(row.get("fm_thresholdlow")),
            unit=_to_str(row.get("fm_unit")),
            value=_to_float(row.get("fm_alarmvalue")),
            starts_at=_to_datetime(row.get("fm_begintime")),
            updated_at=_to_datetime(row.get("fm_latelytime")),
            total=_to_int(row.get("fm_alarmtimes")),
            status=_to_int(row.get("fm_alarmstatus")),
            customer_id=_to_int(row.get("fm_ciid")),
            customer_name=_to_str(row.get("fm_ciname")),
            extra=_to_str(row.get("fm_extrainfo")),
        )


@dataclass(frozen=True)
class RuleDefinition:
    rule_id: int
    domain: str = ""
    domain_id: int = 0
    rule_code: str = ""
    rule_name: str = ""
    threshold_high: float = 0.0
    threshold_low: float = 0.0
    unit: str = ""
    attention: int = 0
    customer_id: int = 0
    email: str = ""
    response_code: str = ""
    diff_type: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RuleDefinition":
        return cls(
            domain_id=_to_int(row.get("domain_id")),
            domain=_to_str(row.get("domain")),
            rule_id=_to_int(row.get("rule_id")),
            rule_code=_to_str(row.get("rule_code")),
            rule_name=_to_str(row.get("rule_name")),
            threshold_high=_to_float(row.get("threshold_high")),
            threshold_low=_to_float(row.get("threshold_low")),
            unit=_to_str(row.get("unit")),
            attention=_to_int(row.get("attention_threshold")),
            customer_id=_to_int(row.get("ci_id")),
            email=_to_str(row.get("notify_mail")),
            response_code=_to_str(row.get("response_code")),
            diff_type=_to_int(row.get("diff_type")),
        )


@dataclass
class CompiledNotification:
    """Um alerta no formato aceito pelo Alertmanager (startsAt/labels/annotations)."""

    starts_at: Optional[datetime]
    labels: Dict[str, str]
    annotations: Dict[str, str]
    alert_id: int = 0
    rule_id: int = 0

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
        }
        # sem startsAt o Alertmanager usa o horário de recebimento
        if self.starts_at is not None:
            payload["startsAt"] = self.starts_at.isoformat()
        return payload
