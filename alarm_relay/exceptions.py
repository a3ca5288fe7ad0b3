"""Hierarquia de erros do relay de alarmes."""

from typing import Optional


class RelayError(Exception):
    """Base para todos os erros do relay."""


class SourceUnavailable(RelayError):
    """Falha ao consultar a tabela de alarmes ou de regras."""


class NotificationRejected(RelayError):
    """Um alarme individual não gerou notificação. O ciclo continua."""

    def __init__(self, alert_id: Optional[int], reason: str):
        super().__init__(f"Alerting ID: {alert_id}, {reason}")
        self.alert_id = alert_id
        self.reason = reason


class UnresolvedRule(NotificationRejected):
    def __init__(self, alert_id: Optional[int], rule_id: Optional[int]):
        super().__init__(alert_id, f"missing rule id: {rule_id}")
        self.rule_id = rule_id


class MalformedDiagnostic(NotificationRejected):
    """fm_extrainfo não segue o formato esperado para o código do alarme."""

    def __init__(self, alert_id: Optional[int], raw: str, reason: str = "fm_extrainfo column couldn't parse"):
        super().__init__(alert_id, f"{reason} {raw!r}")
        self.raw = raw


class RuleConstraintViolation(NotificationRejected):
    pass


class UnsupportedAlertKind(NotificationRejected):
    def __init__(self, alert_id: Optional[int], code: str):
        super().__init__(alert_id, f"unsupported alert code {code!r}")
        self.code = code


class DeliveryFailure(RelayError):
    """Erro de transporte ou resposta não-2xx do Alertmanager."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
