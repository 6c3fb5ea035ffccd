import logging
import os

from config.settings import WindowConfig, WorkshopConfig
from workshop.app import WorkshopApp

# Логи в stderr; уровень через WORKSHOP_LOG_LEVEL
logging.basicConfig(
    level=os.getenv("WORKSHOP_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)


def main() -> None:
    app = WorkshopApp(window=WindowConfig(), workshop=WorkshopConfig())
    app.run()


if __name__ == "__main__":
    main()
