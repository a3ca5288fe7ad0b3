#!/usr/bin/env python3
import os
import sys
import unittest
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, MetaData, String, Table, create_engine, text
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from alarm_relay.exceptions import SourceUnavailable
from alarm_relay.sources import AlertSource, RuleSource, create_db_engine

NOW = datetime(2020, 9, 22, 12, 0, 0)

metadata = MetaData()

alarminfo = Table(
    "fm_alarminfo", metadata,
    Column("id", Integer, primary_key=True),
    Column("fm_type", Integer),
    Column("fm_ruleid", Integer),
    Column("fm_itemcode", String(8)),
    Column("fm_thresholdhigh", Float),
    Column("fm_thresholdlow", Float),
    Column("fm_unit", String(16)),
    Column("fm_alarmvalue", Float),
    Column("fm_begintime", DateTime),
    Column("fm_latelytime", DateTime),
    Column("fm_alarmtimes", Integer),
    Column("fm_alarmstatus", Integer),
    Column("fm_ciid", Integer),
    Column("fm_ciname", String(64)),
    Column("fm_extrainfo", String(255)),
)

monitor_rule = Table(
    "real_flux_monitor_rule", metadata,
    Column("id", Integer, primary_key=True),
    Column("item_id", String(8)),
    Column("threshold_high", Float),
    Column("threshold_low", Float),
    Column("unit", String(16)),
    Column("attention_threshold", Integer),
    Column("ci_id", Integer),
    Column("notify_mail", String(255)),
    Column("res_code", String(32)),
    Column("diff_type", Integer),
    Column("status", Integer),
)

monitor_item = Table(
    "real_flux_monitor_item", metadata,
    Column("item_code", String(8), primary_key=True),
    Column("item_name", String(64)),
)

monitor_domain = Table(
    "real_flux_monitor_domain", metadata,
    Column("domain_id", Integer, primary_key=True),
    Column("domain_name", String(128)),
    Column("rule_id", Integer),
)


def memory_engine():
    return create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})


def insert_rows(conn, table, rows):
    # uma linha por vez: as linhas não têm todas as mesmas colunas
    for row in rows:
        conn.execute(table.insert(), row)


class TestSources(unittest.TestCase):
    def setUp(self):
        self.engine = memory_engine()
        metadata.create_all(self.engine)
        with self.engine.begin() as conn:
            insert_rows(conn, alarminfo, [
                dict(id=1, fm_ruleid=10, fm_itemcode="0401", fm_alarmvalue=12.5, fm_unit="Mb/s",
                     fm_begintime=datetime(2020, 9, 22, 11, 0), fm_latelytime=datetime(2020, 9, 22, 11, 50),
                     fm_ciname="ACME", fm_extrainfo=None),
                dict(id=2, fm_ruleid=10, fm_itemcode="0401", fm_alarmvalue=1.0,
                     fm_begintime=datetime(2020, 9, 22, 10, 0), fm_latelytime=datetime(2020, 9, 22, 11, 30)),
            ])
            insert_rows(conn, monitor_item, [dict(item_code="0401", item_name="Origin Bandwidth")])
            insert_rows(conn, monitor_rule, [
                dict(id=10, item_id="0401", threshold_high=5, threshold_low=1, unit="Mb/s",
                     notify_mail="ops@example.com", res_code="", diff_type=0, status=1),
                dict(id=11, item_id="0401", threshold_high=5, status=0),
                dict(id=12, item_id="0401", threshold_high=9, status=1),
            ])
            insert_rows(conn, monitor_domain, [
                dict(domain_id=1, domain_name="a.example.com", rule_id=10),
                dict(domain_id=2, domain_name="b.example.com", rule_id=10),
                dict(domain_id=3, domain_name="c.example.com", rule_id=11),
            ])

    def tearDown(self):
        self.engine.dispose()

    def test_active_alerts_window(self):
        alerts = AlertSource(self.engine).fetch_active(now=NOW)
        self.assertEqual([a.id for a in alerts], [1])
        alert = alerts[0]
        self.assertEqual(alert.code, "0401")
        self.assertEqual(alert.rule_id, 10)
        self.assertEqual(alert.customer_name, "ACME")
        self.assertEqual(alert.extra, "")
        self.assertEqual(alert.starts_at, datetime(2020, 9, 22, 11, 0))

        wider = AlertSource(self.engine, window_minutes=60).fetch_active(now=NOW)
        self.assertEqual(sorted(a.id for a in wider), [1, 2])

    def test_bad_rows_do_not_drop_valid_alerts(self):
        # MySQL legado guarda datas zeradas; PyMySQL as devolve como texto
        insert_raw = text(
            "INSERT INTO fm_alarminfo (id, fm_ruleid, fm_itemcode, fm_begintime, fm_latelytime) "
            "VALUES (:id, :rule_id, '0401', :begin, :lately)"
        )
        with self.engine.begin() as conn:
            conn.execute(insert_raw, dict(id=3, rule_id=10, begin="0000-00-00 00:00:00",
                                          lately="2020-09-22 11:55:00.000000"))
            conn.execute(insert_raw, dict(id=4, rule_id="abc", begin="2020-09-22 11:00:00.000000",
                                          lately="2020-09-22 11:56:00.000000"))

        with self.assertLogs("alarm_relay", level="WARNING") as logs:
            alerts = AlertSource(self.engine).fetch_active(now=NOW)

        self.assertEqual(sorted(a.id for a in alerts), [1, 3], "linhas válidas devem ser mantidas")
        zero_date = [a for a in alerts if a.id == 3][0]
        self.assertIsNone(zero_date.starts_at)
        self.assertTrue(any("0000-00-00" in line for line in logs.output))
        self.assertTrue(any("Linha ignorada" in line for line in logs.output))

    def test_active_rules_join(self):
        rules = RuleSource(self.engine).fetch_active()
        # regra 10 aparece uma vez por domínio, regra 12 sem domínio, regra 11 inativa
        self.assertEqual(sorted(r.rule_id for r in rules), [10, 10, 12])
        rule_10 = [r for r in rules if r.rule_id == 10]
        self.assertEqual(sorted(r.domain for r in rule_10), ["a.example.com", "b.example.com"])
        self.assertEqual(rule_10[0].rule_name, "Origin Bandwidth")
        self.assertEqual(rule_10[0].email, "ops@example.com")
        rule_12 = [r for r in rules if r.rule_id == 12][0]
        self.assertEqual(rule_12.domain, "")

    def test_missing_tables_raise_source_unavailable(self):
        engine = memory_engine()
        with self.assertRaises(SourceUnavailable):
            AlertSource(engine).fetch_active(now=NOW)
        with self.assertRaises(SourceUnavailable):
            RuleSource(engine).fetch_active()
        engine.dispose()


class TestCreateEngine(unittest.TestCase):
    def test_connects(self):
        engine = create_db_engine("sqlite://")
        engine.dispose()

    def test_unreachable_database(self):
        with self.assertRaises(SourceUnavailable):
            create_db_engine("sqlite:////caminho/inexistente/alarmes.db")


if __name__ == '__main__':
    unittest.main()
