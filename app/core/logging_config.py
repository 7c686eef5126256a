"""Process-wide logging setup. Modules log through logging.getLogger(__name__)."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the root logger (idempotent)."""
    global _configured
    if _configured:
        return
    logging.basicConfig(level=(level or "INFO").upper(), format=LOG_FORMAT)
    _configured = True
