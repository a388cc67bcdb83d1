import logging

from app.config import get_settings


def setup_logging() -> None:
    """Configure the root logger once at process start."""
    root = logging.getLogger()

    # Uvicorn or a test runner may already have installed handlers
    if root.handlers:
        return

    level = getattr(logging, get_settings().log_level.upper(), logging.INFO)
    root.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )
    root.addHandler(handler)
