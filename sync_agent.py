"""Run the device-side sync agent until interrupted."""

import os
import time

from dotenv import load_dotenv

from config import get_config
from frota.offline import SyncAgent
from frota.utils.logging_config import setup_logging


def main():
    load_dotenv()
    config = get_config(os.getenv('FLASK_ENV', 'development'))
    setup_logging(config.LOG_LEVEL, config.LOG_DIR)

    agent = SyncAgent.from_config(config)
    agent.notifier.subscribe(lambda level, message: print(f"[{level}] {message}"))
    agent.monitor.subscribe(lambda state: print(f"Connectivity: {state.value}"))
    agent.start()

    print(f"Sync agent running against {config.API_BASE_URL} "
          f"({agent.pending_count} records pending). Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        agent.stop()


if __name__ == '__main__':
    main()
