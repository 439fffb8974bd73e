# livegraph/core/logging.py
import logging

from rich.logging import RichHandler

def configure_logging(level: str = "INFO") -> None:
    """Routes all livegraph loggers through a single rich handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; one per poll is too chatty.
    logging.getLogger("httpx").setLevel(logging.WARNING)
