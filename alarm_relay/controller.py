from typing import Optional

from flask import Flask

from .constants import BUILD_DATE, VERSION
from .dispatcher import IntervalScheduler


def create_app(scheduler: Optional[IntervalScheduler] = None):
    app = Flask(__name__)

    @app.route('/health', methods=['GET'])
    def health():
        running = scheduler is not None and scheduler.is_alive() and not scheduler.stopped
        return {'status': 'ok', 'service': 'alarm-relay', 'scanner_running': running}, 200

    @app.route('/version', methods=['GET'])
    def version():
        return {'version': VERSION, 'build_date': BUILD_DATE}, 200

    # Inicia a varredura periódica (se fornecida)
    if scheduler is not None and not scheduler.is_alive():
        scheduler.start()

    return app
