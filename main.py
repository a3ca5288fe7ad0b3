import argparse
import logging
import signal
import sys

from alarm_relay import constants
from alarm_relay.controller import create_app
from alarm_relay.dispatcher import DispatchCycle, IntervalScheduler
from alarm_relay.exceptions import SourceUnavailable
from alarm_relay.sources import AlertSource, RuleSource, create_db_engine

logger = logging.getLogger("alarm_relay")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Relay de alarmes fm_alarminfo -> Alertmanager")
    parser.add_argument("--version", action="store_true", help="show program version")
    parser.add_argument("--dsn", default=constants.DATABASE_DSN, help="set DSN (SQLAlchemy URL) for connect DB")
    parser.add_argument("--interval", type=int, default=constants.SCAN_INTERVAL_SECONDS, help="interval in seconds for scan alerting")
    parser.add_argument("--webhook", default=constants.ALERTMANAGER_WEBHOOK_URL, help="set alertmanager webhook")
    parser.add_argument("--port", type=int, default=constants.APP_PORT, help="port for the health endpoint")
    return parser, parser.parse_args(argv)


def main(argv=None):
    parser, args = parse_args(argv)
    if args.version:
        print(f"version: {constants.VERSION} build_date: {constants.BUILD_DATE}")
        return 0

    if not args.dsn:
        parser.print_usage()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if constants.DEBUG_MODE else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        engine = create_db_engine(args.dsn)
    except SourceUnavailable as e:
        logger.critical(str(e))
        return 1

    cycle = DispatchCycle(AlertSource(engine), RuleSource(engine), webhook_url=args.webhook)
    scheduler = IntervalScheduler(cycle.run_once, interval=args.interval)

    def handle_term(signum, frame):
        logger.info("Received SIGTERM, exiting gracefully....")
        scheduler.stop()
        scheduler.join(timeout=constants.WEBHOOK_TIMEOUT_SECONDS + constants.DATABASE_TIMEOUT_SECONDS)
        engine.dispose()
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_term)
    signal.signal(signal.SIGINT, handle_term)

    app = create_app(scheduler)
    # use_reloader=False evita iniciar o scheduler duas vezes
    app.run(host='0.0.0.0', port=args.port, debug=constants.DEBUG_MODE, use_reloader=False)
    return 0


if __name__ == '__main__':
    sys.exit(main())
