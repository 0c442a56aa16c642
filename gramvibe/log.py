import logging

# ---- logging ----
logger = logging.getLogger("gramvibe")
if not logger.handlers:
    h = logging.StreamHandler()
    h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s gramvibe: %(message)s"))
    logger.addHandler(h)
logger.setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Child logger of the package logger, e.g. get_logger("polling") -> gramvibe.polling."""
    return logger.getChild(name)
