"""
Parser do campo fm_extrainfo.

O formato depende do código do alarme:

- 1005/1007 (contagem de status HTTP): 5 campos separados por ':'
    1600706700:8.670:(6935/79986):410 499:410/6914 499/21
- 0302 (variação de banda): 2 segmentos separados por ',', cada um 'timestamp:valor'
    1600755000:7.2886,1600150200:26158.3969
"""
from datetime import datetime
from typing import NamedTuple, Optional

from .constants import ALERT_TIMEZONE
from .exceptions import MalformedDiagnostic
from .utils import from_unix

COUNT_THRESHOLD_FIELDS = 5
BANDWIDTH_SEGMENTS = 2
BANDWIDTH_SEGMENT_FIELDS = 2


class CountThresholdDetail(NamedTuple):
    timestamp: str
    ratio: str
    count: str
    codes: str
    detail: str


class BandwidthSample(NamedTuple):
    moment: datetime
    magnitude: str


class BandwidthDeltaDetail(NamedTuple):
    current: BandwidthSample
    reference: BandwidthSample


def parse_count_threshold(raw: str, alert_id: Optional[int] = None) -> CountThresholdDetail:
    fields = (raw or "").split(":")
    if len(fields) != COUNT_THRESHOLD_FIELDS:
        raise MalformedDiagnostic(alert_id, raw)
    return CountThresholdDetail(*fields)


def parse_bandwidth_delta(raw: str, alert_id: Optional[int] = None, tz_name: str = ALERT_TIMEZONE) -> BandwidthDeltaDetail:
    segments = (raw or "").split(",")
    if len(segments) != BANDWIDTH_SEGMENTS:
        raise MalformedDiagnostic(alert_id, raw)

    samples = []
    for segment in segments:
        parts = segment.split(":")
        if len(parts) != BANDWIDTH_SEGMENT_FIELDS:
            raise MalformedDiagnostic(alert_id, raw)
        # timestamp inválido não descarta o alarme, cai na época zero
        samples.append(BandwidthSample(from_unix(parts[0], tz_name), parts[1]))

    return BandwidthDeltaDetail(*samples)
