########################################################################################
##
##                              LOGGING CONFIGURATION
##                                (utils/logger.py)
##
########################################################################################

# IMPORTS ==============================================================================

import logging
import sys


# CONSTANTS ============================================================================

LOGGER_NAME = "rkopt"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

#verbosity of the optimizer mapped to logging levels
VERBOSITY_LEVELS = {
    "off": logging.ERROR,
    "notify": logging.WARNING,
    "final": logging.INFO,
    "iter": logging.DEBUG,
    }


# FUNCTIONS ============================================================================

def setup_logger(level=logging.WARNING, log_file=None, format_string=None):
    """Configure the package logger.

    The stream handler is only attached once, repeated calls just adjust
    the level.

    Parameters
    ----------
    level : int
        logging level of the package logger
    log_file : str, None
        optional path of an additional log file
    format_string : str, None
        custom format, defaults to ``LOG_FORMAT``

    Returns
    -------
    logger : logging.Logger
        the configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(format_string or LOG_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def get_logger(name=None):
    """Logger of a module below the package logger.

    Parameters
    ----------
    name : str, None
        module name, for example ``__name__``

    Returns
    -------
    logger : logging.Logger
    """
    if name is None or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_verbosity(verbosity):
    """Set the package log level from an optimizer verbosity name.

    Parameters
    ----------
    verbosity : str
        one of 'off', 'notify', 'final' or 'iter'

    Returns
    -------
    logger : logging.Logger
        the package logger
    """
    try:
        level = VERBOSITY_LEVELS[verbosity]
    except KeyError:
        raise ValueError(
            f"unknown verbosity '{verbosity}', expected one of {sorted(VERBOSITY_LEVELS)}"
            ) from None
    return setup_logger(level)
