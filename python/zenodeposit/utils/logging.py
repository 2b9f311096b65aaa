"""
Utility logging functions
"""
import sys, logging

BLAB = logging.DEBUG - 1

def blab(log, msg, *args, **kwargs):
    """
    log a verbose message. This uses a log level, BLAB, that is lower than 
    DEBUG, intended for the per-request details of each exchange with the 
    Zenodo service; these are not displayed when a log's level is set to DEBUG.

    :param Logger log:  the Logger object to record to
    :param str    msg:  the message to write
    :param args:        treat msg as a template and insert these values
    :param kwargs:      other arbitrary keywords to pass to log.log()
    """
    log.log(BLAB, msg, *args, **kwargs)

def configure_log(prog: str, logfile: str=None, verbose: bool=False, quiet: bool=False,
                  stream=None):
    """
    attach handlers to the root logger for a command-line program.  Messages go to standard 
    error (or ``stream``) unless ``quiet`` is True, and additionally to ``logfile`` if given.

    :param str  prog:     the program name to label messages with
    :param str  logfile:  the path to a file to append messages to
    :param bool verbose:  if True, include DEBUG messages
    :param bool quiet:    if True, do not write messages to standard error
    """
    rootlog = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO

    if logfile:
        hdlr = logging.FileHandler(logfile)
        hdlr.setFormatter(logging.Formatter("%(asctime)s " + prog + 
                                            ".%(name)s %(levelname)s: %(message)s"))
        hdlr.setLevel(logging.DEBUG)
        rootlog.addHandler(hdlr)
        rootlog.setLevel(level)

    if not quiet:
        hdlr = logging.StreamHandler(stream or sys.stderr)
        hdlr.setFormatter(logging.Formatter(prog + ": %(levelname)s: %(message)s"))
        hdlr.setLevel(logging.DEBUG)
        rootlog.addHandler(hdlr)
        rootlog.setLevel(level)
    elif not rootlog.handlers:
        rootlog.addHandler(logging.NullHandler())
