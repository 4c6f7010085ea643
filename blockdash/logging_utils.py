import logging

FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format=FORMAT, level=level)
    # web3 request tracing is noisy at DEBUG
    logging.getLogger("web3").setLevel(max(logging.getLevelName(level), logging.INFO))
