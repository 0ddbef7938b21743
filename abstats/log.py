import logging
import sys


FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(FORMAT))

    # force=True so reruns (e.g. Streamlit) don't stack handlers
    logging.basicConfig(level=logging.getLevelName(log_level), handlers=[handler], force=True)
