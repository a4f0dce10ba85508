"""Run the API server with ``python -m agriinsight``."""
from uvicorn import run

from agriinsight.core.config import get_settings
from agriinsight.main import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    run("agriinsight.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
