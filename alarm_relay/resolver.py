import logging
from typing import Dict, Iterable, Iterator, Tuple

from .exceptions import UnresolvedRule
from .models import AlertRecord, RuleDefinition

logger = logging.getLogger(__name__)


def build_rule_map(rules: Iterable[RuleDefinition]) -> Dict[int, RuleDefinition]:
    """
    Indexa as regras por rule_id.
    O join com real_flux_monitor_domain pode repetir a mesma regra (uma linha por
    domínio); a última linha vence.
    """
    rule_map: Dict[int, RuleDefinition] = {}
    for rule in rules:
        rule_map[rule.rule_id] = rule
    return rule_map


def lookup_rule(rule_map: Dict[int, RuleDefinition], alert: AlertRecord) -> RuleDefinition:
    rule = rule_map.get(alert.rule_id)
    if rule is None:
        raise UnresolvedRule(alert.id, alert.rule_id)
    return rule


def resolve(alerts: Iterable[AlertRecord], rule_map: Dict[int, RuleDefinition]) -> Iterator[Tuple[RuleDefinition, AlertRecord]]:
    """Gera pares (regra, alarme); alarmes sem regra são registrados no log e ignorados."""
    for alert in alerts:
        try:
            rule = lookup_rule(rule_map, alert)
        except UnresolvedRule as e:
            logger.warning(f"Missing rule id: {e.rule_id}, alerting: {alert}")
            continue
        yield rule, alert
