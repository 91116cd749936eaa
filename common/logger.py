import logging

LOG_FORMAT = '%(asctime)s %(levelname)-8s %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def config_logger(logging_level):
    """Configure the root logger with the given level name (e.g. 'INFO')."""
    level = getattr(logging, str(logging_level).upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid logging level: {logging_level}")

    logging.basicConfig(
        format=LOG_FORMAT,
        level=level,
        datefmt=DATE_FORMAT,
        force=True,
    )
    # pika is very chatty at INFO
    logging.getLogger("pika").setLevel(logging.WARNING)
