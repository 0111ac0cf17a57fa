"""Logging setup shared by the API process and the scripts."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(debug: bool = False) -> None:
    """Configure the root logger once; ``debug`` turns on score tracing."""
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    # DataIntegrityWarning and friends end up in the log instead of stderr
    logging.captureWarnings(True)
    if debug:
        logging.getLogger("app.services").setLevel(logging.DEBUG)
