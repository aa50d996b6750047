"""CLI logging: bare messages on stdout, shell commands visible at DEBUG."""

import logging
import sys

PLAIN_FORMAT = "%(message)s"


def setup_cli_logging(verbose=False):
    """Send every record to stdout as a bare message, the way print() would.

    verbose=True lowers the threshold to DEBUG, which also shows each
    docker invocation before it runs.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
