import logging
import logging.handlers
import os

#create logger
logger = logging.getLogger("admcmc")
"""show the package activity in the terminal and store debug details in a log file - **debug.log**."""
logger.setLevel(logging.DEBUG)

 # create console handler and set level to info
_handler = logging.StreamHandler()
_handler.setLevel(logging.INFO)
_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
_handler.setFormatter(_formatter)
logger.addHandler(_handler)

# create error file handler and set level to debug
_handler = logging.handlers.RotatingFileHandler(os.path.join(os.path.dirname(__file__), "debug.log"), "w", maxBytes=1024*1024, backupCount=10, delay=True)
_handler.setLevel(logging.DEBUG)
_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
_handler.setFormatter(_formatter)
logger.addHandler(_handler)


def reporter(log, printflag):
    """Return the logging method used for progress reports.

    Progress goes to INFO (terminal) when printflag is set, to DEBUG
    (log file only) otherwise.
    """
    if printflag:
        return log.info
    return log.debug
