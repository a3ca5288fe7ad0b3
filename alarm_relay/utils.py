import logging
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .constants import ALERT_TIMEZONE

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@lru_cache(maxsize=8)
def load_timezone(name: str = ALERT_TIMEZONE) -> Optional[tzinfo]:
    """Retorna o fuso pelo nome IANA, ou None se a base de fusos não tiver a zona."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning(f"Fuso horário '{name}' indisponível: {e}")
        return None


def time_in(value: Optional[datetime], name: str = ALERT_TIMEZONE) -> Optional[datetime]:
    """
    Converte `value` para o fuso `name`.
    Datetimes sem tzinfo são interpretados no horário local do servidor (mesma
    convenção do driver MySQL com loc=Local). Sem o fuso, usa o fuso local do servidor.
    """
    if value is None:
        return None
    tz = load_timezone(name)
    if tz is None:
        return value.astimezone()
    return value.astimezone(tz)


def from_unix(raw: str, name: str = ALERT_TIMEZONE) -> datetime:
    """Segundos Unix (texto) -> datetime no fuso `name`. Valor inválido vira a época zero."""
    tz = load_timezone(name)
    try:
        seconds = int(raw.strip())
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        moment = EPOCH
    if tz is None:
        return moment.astimezone()
    return moment.astimezone(tz)


def format_rfc3339(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat()


def format_number(value: float) -> str:
    return f"{float(value):.2f}"
