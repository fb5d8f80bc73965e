"""Independent random number streams, one set per chain."""
import logging
import time

import numpy as np

from admcmc.errors import ConfigurationError

logger = logging.getLogger(__name__)

SEED_OFFSET = 3000
_SEED_MOD = 2 ** 32


class RandomStream(object):
    """Seeded generator of uniform and standard normal numbers.

    Every stream owns its own numpy RandomState, so two streams built with
    the same seed produce the same sequence of numbers for the same
    sequence of calls.
    """

    def __init__(self, seed):
        self.seed = int(seed)
        self._rand = np.random.mtrand.RandomState(self.seed % _SEED_MOD)
        logger.debug("Created RandomStream with seed={}".format(str(self.seed)))

    def next_uniform(self):
        """Uniform random number in [0,1)"""
        return self._rand.random_sample()

    def next_gaussian(self):
        """Standard normal random number"""
        return self._rand.standard_normal()

    def get_state(self):
        """Save the internal state of the stream"""
        return self._rand.get_state()

    def set_state(self, state):
        """Restore a state obtained from get_state"""
        self._rand.set_state(state)


class ChainStreams(object):
    """The three streams used by one chain.

    accept draws the uniform number of the Metropolis test, select chooses
    the parameters to perturb and step draws the gaussian perturbations.
    """

    def __init__(self, seeds):
        seeds = [int(s) for s in seeds]
        if len(seeds) != 3:
            raise ConfigurationError("A chain needs exactly 3 seeds, got {}".format(str(seeds)))
        self.seeds = seeds
        self.accept = RandomStream(seeds[0])
        self.select = RandomStream(seeds[1])
        self.step = RandomStream(seeds[2])

    def get_state(self):
        return (self.accept.get_state(), self.select.get_state(), self.step.get_state())

    def set_state(self, state):
        self.accept.set_state(state[0])
        self.select.set_state(state[1])
        self.step.set_state(state[2])


def timeseed():
    """Three seeds derived from the current time"""
    t = int(time.time() * 1000)
    return np.array([t, t + 1000, t + 2000], dtype=np.int64)


def chain_seeds(seeds, chains):
    """Return a (chains, 3) array of seeds.

    :Parameters:
        -  seeds : None, sequence of 3 ints or (chains, 3) array
            None draws time-derived seeds. With a single row of seeds,
            every further chain gets the seeds of the previous chain
            plus 3000. A full array is used as given.
        -  chains : int
            Number of chains.
    """
    if seeds is None:
        seeds = timeseed()
        logger.debug("No seeds given, using time seeds {}".format(str(seeds)))
    seeds = np.array(seeds, dtype=np.int64)
    if seeds.shape == (3,) or seeds.shape == (1, 3):
        first = seeds.reshape(3)
        return np.array([first + SEED_OFFSET * i for i in range(chains)], dtype=np.int64)
    if seeds.shape == (chains, 3):
        return seeds
    raise ConfigurationError("Seeds must have shape (3,) or ({}, 3), got {}".format(str(chains), str(seeds.shape)))
