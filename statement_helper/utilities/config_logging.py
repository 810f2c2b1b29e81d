# statement_helper/utilities/config_logging.py
LOG_DIR = "logs"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(levelname)s %(name)s: %(message)s"},
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s "
            "[%(process)d:%(threadName)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        # the CLI prints its own results; the console only carries problems
        "console": {
            "class": "logging.StreamHandler",
            "level": "WARNING",
            "formatter": "simple",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "verbose",
            "filename": f"{LOG_DIR}/statement_helper.log",
            "maxBytes": 5_000_000,
            "backupCount": 5,
            "encoding": "utf-8",
        },
    },
    "loggers": {
        # third-party libraries log to the file at INFO and up
        "": {
            "level": "INFO",
            "handlers": ["console", "file"],
        },
        # parse, rule and export details for one run land in the rotating file
        "statement_helper": {"level": "DEBUG", "propagate": True},
        # pandas parser warnings are noisy on ragged bank exports
        "pandas": {"level": "WARNING", "propagate": True},
    },
}
