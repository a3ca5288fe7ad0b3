"""
Monta a mensagem do Alertmanager para um par (regra, alarme).

Cada código de alarme tem uma entrada em ALERT_KINDS com o nome de exibição e a
função que gera a descrição. Para suportar um código novo basta registrar outro
AlertKind.
"""
import logging
from typing import Callable, Dict, NamedTuple, Optional

from .constants import (
    ALERT_TIMEZONE,
    ALERTING_NAME_EN,
    ALLOWED_DIFF_TYPES,
    FORWARD_UNKNOWN_KINDS,
    INTERNAL_ROUTING_MARKER,
    PROVENANCE_LABELS,
    SEVERITY,
    TO_CUSTOMER_NO,
    TO_CUSTOMER_YES,
)
from .exceptions import RuleConstraintViolation, UnsupportedAlertKind
from .models import AlertRecord, CompiledNotification, RuleDefinition
from .parsing import parse_bandwidth_delta, parse_count_threshold
from .utils import format_number as n, format_rfc3339, time_in

logger = logging.getLogger(__name__)


class AlertKind(NamedTuple):
    code: str
    display_name: str
    describe: Callable[[RuleDefinition, AlertRecord], str]
    # ignora o marcador de roteamento interno em notify_mail
    always_visible: bool = False


def _above(rule: RuleDefinition, alert: AlertRecord) -> str:
    return f"threshold: gt {n(rule.threshold_high)}{rule.unit}, VALUE: {n(alert.value)}{alert.unit}"


def _below(rule: RuleDefinition, alert: AlertRecord) -> str:
    return f"threshold: lt {n(rule.threshold_low)}{rule.unit}, VALUE: {n(alert.value)}{alert.unit}"


def describe_http_code_sum(rule: RuleDefinition, alert: AlertRecord) -> str:
    return f"{_above(rule, alert)}, http code: {rule.response_code}"


def describe_http_code_count(rule: RuleDefinition, alert: AlertRecord) -> str:
    detail = parse_count_threshold(alert.extra, alert.id)
    return f"{_above(rule, alert)}, count: {detail.count}, detail: {detail.detail}"


def describe_bandwidth_delta(rule: RuleDefinition, alert: AlertRecord) -> str:
    if rule.diff_type not in ALLOWED_DIFF_TYPES:
        raise RuleConstraintViolation(
            alert.id,
            f"Rule ID: {rule.rule_id}, diff_type not in allowed set {sorted(ALLOWED_DIFF_TYPES)} (got {rule.diff_type})",
        )
    current, reference = parse_bandwidth_delta(alert.extra, alert.id, ALERT_TIMEZONE)
    return (
        f"threshold: (gt {n(rule.threshold_high)}{rule.unit} || lt -{n(rule.threshold_low)}{rule.unit}), "
        f"VALUE: {n(alert.value)}{alert.unit}, "
        f"detail: {format_rfc3339(current.moment)} > {current.magnitude}Mb/s, "
        f"{format_rfc3339(reference.moment)} > {reference.magnitude}Mb/s"
    )


ALERT_KINDS: Dict[str, AlertKind] = {
    kind.code: kind
    for kind in (
        AlertKind("1002", ALERTING_NAME_EN["1002"], describe_http_code_sum),
        AlertKind("1005", ALERTING_NAME_EN["1005"], describe_http_code_count),
        AlertKind("1007", ALERTING_NAME_EN["1007"], describe_http_code_count),
        AlertKind("0302", ALERTING_NAME_EN["0302"], describe_bandwidth_delta),
        AlertKind("0303", ALERTING_NAME_EN["0303"], _above, always_visible=True),
        AlertKind("0401", ALERTING_NAME_EN["0401"], _above),
        AlertKind("0701", ALERTING_NAME_EN["0701"], _below),
    )
}


def is_visible_to_customer(rule: RuleDefinition, kind: Optional[AlertKind]) -> bool:
    if kind is not None and kind.always_visible:
        return True
    return INTERNAL_ROUTING_MARKER not in (rule.email or "")


def compile_notification(rule: RuleDefinition, alert: AlertRecord, forward_unknown: bool = FORWARD_UNKNOWN_KINDS) -> CompiledNotification:
    """
    Gera a notificação do alarme ou levanta NotificationRejected.

    Rejeições possíveis:
        MalformedDiagnostic: fm_extrainfo fora do formato do código
        RuleConstraintViolation: diff_type da regra não aceito (0302)
        UnsupportedAlertKind: código sem entrada em ALERT_KINDS (se forward_unknown=False)
    """
    kind = ALERT_KINDS.get(alert.code)
    if kind is None and not forward_unknown:
        raise UnsupportedAlertKind(alert.id, alert.code)

    description = kind.describe(rule, alert) if kind else ""
    labels = {
        "alertname": kind.display_name if kind else "",
        "severity": SEVERITY,
        "rule_id": alert.code,
        "domain": rule.domain,
        "customer": alert.customer_name,
        "to_customer": TO_CUSTOMER_YES if is_visible_to_customer(rule, kind) else TO_CUSTOMER_NO,
    }
    labels.update(PROVENANCE_LABELS)

    return CompiledNotification(
        starts_at=time_in(alert.starts_at, ALERT_TIMEZONE),
        labels=labels,
        annotations={"description": description},
        alert_id=alert.id,
        rule_id=rule.rule_id,
    )
