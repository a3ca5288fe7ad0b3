import json
import logging
from typing import Iterable

import requests

from .constants import DEBUG_MODE, WEBHOOK_TIMEOUT_SECONDS
from .exceptions import DeliveryFailure
from .models import CompiledNotification

logger = logging.getLogger(__name__)


def send_alertmanager_payload(url: str, notifications: Iterable[CompiledNotification], timeout: int = WEBHOOK_TIMEOUT_SECONDS):
    """POST do lote como array JSON. Sem retry: a próxima varredura é a recuperação."""
    payload = [item.to_dict() for item in notifications]
    if DEBUG_MODE:
        logger.debug(f"Alertmanager payload: {json.dumps(payload, ensure_ascii=False)}")

    try:
        resp = requests.post(url, json=payload, timeout=timeout)
    except requests.RequestException as e:
        raise DeliveryFailure(f"Request err: {e}") from e

    if not 200 <= resp.status_code < 300:
        raise DeliveryFailure(
            f"Request did not return OK: {resp.status_code} {resp.text[:200]}",
            status_code=resp.status_code,
        )
    return resp
