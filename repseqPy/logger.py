import logging
import sys


class _Level:
    DEBUG = 'debug'
    CRIT = 'critical'
    INFO = 'info'
    WARN = 'warning'
    ERR = 'error'
    EXCEPT = 'exception'

    def __init__(self, streamLevel=logging.WARN, fileLevel=logging.DEBUG):
        self.streamLevel = streamLevel
        self.fileLevel = fileLevel


# LOG FILE HEADER - displayed on the top of each *.log file depending on analysis task
_BANNER = {
    'all': "Running the complete repertoire comparison",
    'diversity': "Diversity Estimation",
    'usage': "V Segment Usage Analysis",
    'overlap': "Pairwise Repertoire Overlap",
    'annotate': "Antigen Specificity Annotation (VDJdb)",
    'default': "Running RepSeq on all sample(s)"
}

LEVEL = _Level()


def printto(stream, message, level=LEVEL.DEBUG):
    """
    logs message into stream at the given level. Nothing happens if stream is None,
    which lets library functions be called without a configured logger.

    >>> printto(None, "silently dropped")
    >>> printto(None, "bad level", level="shout")
    Traceback (most recent call last):
    ...
    ValueError: Unknown logging level shout
    """
    level = level.lower()

    if level not in [_Level.DEBUG, _Level.CRIT, _Level.INFO, _Level.WARN, _Level.ERR, _Level.EXCEPT]:
        raise ValueError("Unknown logging level " + level)

    if stream:
        getattr(stream, level)(message)


def setupLogger(name, task, logfile, stream=sys.stdout, flevel=LEVEL.fileLevel, slevel=LEVEL.streamLevel):
    with open(logfile, 'a') as fp:
        fp.write(formattedTitle(task) + '\n')

    datetimefmt = "%Y-%m-%d %H:%M:%S"

    logger = logging.getLogger(name)
    logger.setLevel(flevel)

    # a logger is process-wide, drop handlers left over by a previous run with the same name
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fh = logging.FileHandler(logfile)
    fh.setLevel(flevel)

    ch = logging.StreamHandler(stream=stream)
    ch.setLevel(slevel)

    formatter = logging.Formatter("%(asctime)s (%(name)s)[%(levelname).4s]: %(message)s", datefmt=datetimefmt)
    fh.setFormatter(formatter)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)
    return logger


def formattedTitle(task, defaultTitle=False):
    if defaultTitle:
        title = _BANNER['default']
    else:
        title = _BANNER.get(task, None)
    if title is None:
        raise ValueError("Unknown task requested. Available tasks are: {}".format(','.join(_BANNER.keys())))
    string = "-" * 100 + '\n'
    string += "|" + " " * 98 + "|\n"
    string += "|" + " " * ((98 - len(title)) // 2) + title + " " * (
            (98 - len(title)) // 2 + (98 - len(title)) % 2) + "|\n"
    string += "|" + " " * 98 + "|\n"
    string += "-" * 100 + '\n'
    return string
