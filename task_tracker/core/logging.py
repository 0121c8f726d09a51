import logging
import sys
from typing import Union

_HANDLER_NAME = "task_tracker.console"


def setup_logging(level: Union[str, int] = logging.INFO) -> None:
    """
    Один обработчик в stderr с единым форматом.
    Вызывать один раз при создании приложения.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    # повторный вызов не должен плодить дубли
    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(fmt)
    root.addHandler(handler)

    # warnings.warn(...) -> логгер 'py.warnings'
    logging.captureWarnings(True)
