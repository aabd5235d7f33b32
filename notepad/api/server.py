from __future__ import annotations

import logging
import sys

import uvicorn

from notepad.api.main import create_app
from notepad.config import Config


def run() -> None:
    config = Config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger(__name__).info("Serving notes from %s", config.db_path)
    uvicorn.run(
        create_app(config=config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    run()
