"""Periodic export of chain samples during sampling."""
import logging
import os
import threading

import numpy as np

logger = logging.getLogger(__name__)


class TextSink(object):
    """Write the samples of each chain to its own text file.

    Chain i (counted from 1) writes to "<i>_<filename>" in the directory of
    filename. The first chunk of a chain truncates its file, later chunks
    are appended.
    """

    def __init__(self, filename):
        self.filename = filename
        self._started = set()
        self._lock = threading.Lock()

    def path(self, chain):
        head, tail = os.path.split(self.filename)
        return os.path.join(head, "{}_{}".format(str(chain + 1), tail))

    def write(self, chain, samples):
        """Write samples (rows = accepted sets) of chain"""
        with self._lock:
            mode = "ab" if chain in self._started else "wb"
            self._started.add(chain)
        path = self.path(chain)
        with open(path, mode) as f:
            np.savetxt(f, samples)
        logger.debug("Wrote {} samples of chain {} to {}".format(str(len(samples)), str(chain), path))

    def read(self, chain):
        """Read back all samples written for chain"""
        return np.loadtxt(self.path(chain), ndmin=2)
