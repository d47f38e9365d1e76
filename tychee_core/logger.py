import logging, json, sys, time, os

_level_override = None


def set_level(level):
    """Apply `level` to every tychee logger, existing and future."""
    global _level_override
    _level_override = str(level).upper()
    for name, logger in list(logging.root.manager.loggerDict.items()):
        if isinstance(logger, logging.Logger) and (name == "tychee" or name.startswith("tychee.")):
            logger.setLevel(_level_override)


def get_logger(name="tychee", level=None, to_file=None):
    """Unified structured logger for all Tychee components."""
    logger = logging.getLogger(name)
    if level is None:
        level = _level_override or os.getenv("TYCHEE_LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # Use UTC timestamps
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            # Ensure the directory exists before writing
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
