"""Configure the root logger for the application."""

import logging

from pythonjsonlogger import jsonlogger

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def setup_logger(level: int = logging.INFO, json: bool = True) -> None:
    """
    Attach a stream handler to the root logger, once per process.

    Records are rendered as JSON unless ``json`` is false. Calling this
    again (e.g. for a second app in the same process) only changes the level.
    """
    root = logging.getLogger()
    if any(getattr(h, '_sims', False) for h in root.handlers):
        root.setLevel(level)
        return
    handler = logging.StreamHandler()
    if json:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
    else:
        formatter = logging.Formatter(FORMAT)
    handler.setFormatter(formatter)
    handler._sims = True     # type: ignore
    root.addHandler(handler)
    root.setLevel(level)
