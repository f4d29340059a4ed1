import logging
import os
import sys
import time
import typing
from logging.handlers import RotatingFileHandler

_LogFormat = '%(asctime)s - %(levelname)s - %(message)s'

def setupLogger(
        logDir: str,
        logFile: str,
        console: bool = True,
        consoleStream: typing.Optional[typing.TextIO] = None
        ) -> str:
    os.makedirs(logDir, exist_ok=True)
    logFile = os.path.join(logDir, logFile)
    fileHandler = RotatingFileHandler(
        logFile,
        maxBytes=1024 * 1024,
        backupCount=10)
    fileFormatter = logging.Formatter(_LogFormat)
    fileFormatter.converter = time.gmtime
    fileHandler.setFormatter(fileFormatter)
    logger = logging.getLogger()
    logger.addHandler(fileHandler)
    if console:
        # Console output is the audit the GM reads so it doesn't have the
        # timestamps the log file has
        consoleHandler = logging.StreamHandler(consoleStream if consoleStream else sys.stdout)
        logger.addHandler(consoleHandler)
    logger.setLevel(logging.INFO)
    return logFile

def setLogLevel(logLevel: int) -> None:
    logger = logging.getLogger()
    logger.setLevel(logLevel)
