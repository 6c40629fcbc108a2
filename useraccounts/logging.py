"""
Provides a consistent logging setup for the user accounts service.

Use :func:`getLogger` in place of :func:`logging.getLogger` so that every
logger shares the JSON formatter and level configured here.

.. code-block:: python

   from useraccounts import logging
   logger = logging.getLogger(__name__)

"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'

DEBUG = logging.DEBUG
INFO = logging.INFO
WARNING = logging.WARNING
ERROR = logging.ERROR


def _level() -> int:
    try:
        return int(os.environ.get('LOGLEVEL', logging.INFO))
    except ValueError:
        level = logging.getLevelName(os.environ['LOGLEVEL'].upper())
        return level if isinstance(level, int) else logging.INFO


def getLogger(name: str, stream: Optional[object] = None) -> logging.Logger:
    """
    Get a JSON-formatted logger.

    Parameters
    ----------
    name : str
        Dotted name of the logger; usually ``__name__``.
    stream : file-like
        Where to write records. Defaults to ``stderr``.

    Returns
    -------
    :class:`logging.Logger`

    """
    logger = logging.getLogger(name)
    if not any(getattr(h, '_useraccounts', False) for h in logger.handlers):
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(JsonFormatter(
            LOG_FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        ))
        handler._useraccounts = True    # type: ignore
        logger.addHandler(handler)
    logger.setLevel(_level())
    logger.propagate = False
    return logger
