import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level_name: str = "INFO") -> None:
    """
    Configure root logging for the server process.

    Safe to call more than once: an existing stream handler installed by a
    previous call is reused rather than duplicated.

    Args:
        level_name: The logging level (e.g., "DEBUG", "INFO").
    """
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers:
        if getattr(handler, "_raugupatis", False):
            handler.setLevel(level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._raugupatis = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # Keep SQL echo out of INFO logs unless explicitly asked for
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level <= logging.DEBUG else logging.WARNING
    )


def mask_email(email: str) -> str:
    """Shorten an email for log lines: ``alice@example.com`` -> ``al***@example.com``."""
    local, _, domain = email.partition("@")
    if not domain:
        return "***"
    return f"{local[:2]}***@{domain}"
