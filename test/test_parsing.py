#!/usr/bin/env python3
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from alarm_relay.exceptions import MalformedDiagnostic
from alarm_relay.parsing import parse_bandwidth_delta, parse_count_threshold
from alarm_relay.utils import format_rfc3339


class TestCountThreshold(unittest.TestCase):
    def test_five_fields(self):
        detail = parse_count_threshold("1600706700:8.670:(6935/79986):410 499:410/6914 499/21", alert_id=1)
        self.assertEqual(detail.timestamp, "1600706700")
        self.assertEqual(detail.count, "(6935/79986)")
        self.assertEqual(detail.detail, "410/6914 499/21")

    def test_wrong_arity_rejected(self):
        for raw in ["", "a:b:c:d", "a:b:c:d:e:f", "1600706700:8.670:(6935/79986):410 499"]:
            with self.assertRaises(MalformedDiagnostic, msg=f"deveria rejeitar {raw!r}") as ctx:
                parse_count_threshold(raw, alert_id=7)
            self.assertEqual(ctx.exception.alert_id, 7)
            self.assertEqual(ctx.exception.raw, raw)

    def test_empty_fields_are_still_fields(self):
        detail = parse_count_threshold("::::", alert_id=1)
        self.assertEqual(detail.count, "")
        self.assertEqual(detail.detail, "")


class TestBandwidthDelta(unittest.TestCase):
    def test_two_segments(self):
        current, reference = parse_bandwidth_delta("1600755000:7.2886,1600150200:26158.3969", alert_id=1)
        self.assertEqual(format_rfc3339(current.moment), "2020-09-22T14:10:00+08:00")
        self.assertEqual(current.magnitude, "7.2886")
        self.assertEqual(format_rfc3339(reference.moment), "2020-09-15T14:10:00+08:00")
        self.assertEqual(reference.magnitude, "26158.3969")

    def test_bad_timestamp_falls_back_to_epoch(self):
        current, reference = parse_bandwidth_delta("agora:7.2886,1600150200:1", alert_id=1)
        self.assertEqual(format_rfc3339(current.moment), "1970-01-01T08:00:00+08:00")
        self.assertEqual(current.magnitude, "7.2886")
        self.assertEqual(format_rfc3339(reference.moment), "2020-09-15T14:10:00+08:00")

    def test_outer_arity_rejected(self):
        for raw in ["1600755000:7.2886", "1:1,2:2,3:3", ""]:
            with self.assertRaises(MalformedDiagnostic, msg=f"deveria rejeitar {raw!r}"):
                parse_bandwidth_delta(raw, alert_id=2)

    def test_inner_arity_rejected(self):
        for raw in ["1600755000,1600150200:1", "1:2:3,4:5", "1:2,3"]:
            with self.assertRaises(MalformedDiagnostic, msg=f"deveria rejeitar {raw!r}"):
                parse_bandwidth_delta(raw, alert_id=2)


if __name__ == '__main__':
    unittest.main()
