"""Parallel Markov chains for posterior sampling."""
import concurrent.futures
import logging
import threading

import numpy as np

from admcmc import proposal
from admcmc.logs import reporter

logger = logging.getLogger(__name__)

LOG_ODDS_MIN = -700.

# Outcomes of a Metropolis decision
REJECTED = 0
POSITIVE = 1
NEGATIVE = -1


def accept_decision(likelinew, likeliold, loglike, accept):
    """Metropolis decision for a candidate with likelihood likelinew.

    A candidate better than the current state is accepted without
    drawing (positive accept). Otherwise one uniform number is drawn from
    the accept stream and the candidate is accepted if the odds ratio
    exceeds it (negative accept). In log form the log odds ratio is
    clipped at -700 before exponentiation. A current likelihood of zero
    accepts any positive candidate and treats a zero candidate as equal.
    """
    if loglike:
        odds = likelinew - likeliold
        if odds > 0.:
            return POSITIVE
        odds = np.exp(max(odds, LOG_ODDS_MIN))
    elif likeliold == 0.:
        if likelinew > 0.:
            return POSITIVE
        odds = 1.
    else:
        odds = likelinew / likeliold
        if odds > 1.:
            return POSITIVE
    if accept.next_uniform() < odds:
        return NEGATIVE
    return REJECTED


class BestRecord(object):
    """Best parameter set and likelihood found by any chain.

    Updates are serialized with a lock, readers get a consistent
    (parameters, likelihood) snapshot.
    """

    def __init__(self, paras, likelihood):
        self._lock = threading.Lock()
        self._paras = np.array(paras, dtype=float)
        self._likelihood = likelihood

    def snapshot(self):
        with self._lock:
            return self._paras.copy(), self._likelihood

    @property
    def paras(self):
        return self.snapshot()[0]

    @property
    def likelihood(self):
        return self.snapshot()[1]

    def update(self, paras, likelihood):
        """Store paras if likelihood is better than the best one. Return True if stored."""
        with self._lock:
            if likelihood > self._likelihood:
                self._paras = np.array(paras, dtype=float)
                self._likelihood = likelihood
                return True
            return False

    def reset_likelihood(self, likelihood):
        """Replace the best likelihood, used after sigma was re-estimated"""
        with self._lock:
            self._likelihood = likelihood


class SampleBuffer(object):
    """Growable holder of accepted parameter sets.

    Rows are accepted iterations, columns are parameters.
    """

    def __init__(self, npar, n=0):
        self.trace = np.zeros((int(n), npar))
        self.counter = 0

    def __len__(self):
        return self.counter

    @property
    def capacity(self):
        return self.trace.shape[0]

    def grow(self, n):
        """Make room for at least n samples, keeping the stored ones"""
        if n > self.capacity:
            new = np.zeros((int(n), self.trace.shape[1]))
            new[:self.counter] = self.trace[:self.counter]
            self.trace = new

    def add(self, x):
        """Add parameter set to the buffer"""
        if self.counter == self.capacity:
            self.grow(max(1, 2 * self.capacity))
        self.trace[self.counter] = x
        self.counter += 1

    def samples(self):
        """Return the stored samples"""
        return self.trace[:self.counter]

    def tail(self, n):
        """Return the newest n samples"""
        return self.trace[max(0, self.counter - n):self.counter]

    def clear(self):
        self.counter = 0

    def averages(self):
        """Return the averages of the sample distributions"""
        return np.average(self.samples(), axis=0)


class Ticker(object):
    """Keep track of progress"""

    def __init__(self, n, interval=0.1, end=1):
        """Initialize counter"""
        self.milestones = np.round(np.arange(interval, end + interval / 2., interval) * n).astype("int")
        self.now = 0.

    def tick(self, i):
        if i in self.milestones:
            mile = np.searchsorted(self.milestones, i)
            self.now = (mile + 1) * 10
            return True
        return False


class Chain(object):
    """One Markov chain of the posterior sampling.

    The chain owns its current state, its acceptance counters, its random
    streams and its sample buffer. The only shared state is the best
    record, which it updates whenever it improves on it.
    """

    def __init__(self, index, likelihood, sigma, streams, paras, bounds, truepara, stepsize,
                 mode=proposal.ONE, loglike=False, best=None, sink=None, chunk=None, printflag=False):
        self.index = index
        self.likelihood = likelihood
        self.sigma = sigma
        self.streams = streams
        self.bounds = bounds
        self.truepara = truepara
        self.stepsize = stepsize
        self.mode = mode
        self.loglike = loglike
        self.best = best
        self.sink = sink
        self.chunk = chunk
        self._report = reporter(logger, printflag)
        self.p = np.array(paras, dtype=float)
        self.likeli = likelihood(self.p, sigma)
        self.n_pos = 0
        self.n_neg = 0
        self.buffer = SampleBuffer(len(self.p))

    @property
    def accepted(self):
        return self.n_pos + self.n_neg

    def step(self):
        """Propose one candidate and decide on it. Return the outcome."""
        paranew, changed = proposal.generate(self.mode, self.p, self.truepara, self.bounds, self.stepsize,
                                             self.streams.select, self.streams.step)
        likelinew = self.likelihood(paranew, self.sigma)
        outcome = accept_decision(likelinew, self.likeli, self.loglike, self.streams.accept)
        if outcome == REJECTED:
            return outcome
        if outcome == POSITIVE:
            self.n_pos += 1
        else:
            self.n_neg += 1
        self.p = paranew
        self.likeli = likelinew
        self.buffer.add(paranew)
        if outcome == POSITIVE and self.best is not None:
            if self.best.update(paranew, likelinew):
                logger.debug("Chain {}: best para changed: {} with likelihood {}".format(str(self.index), str(paranew), str(likelinew)))
        if self.sink is not None and self.accepted % self.chunk == 0:
            self.sink.write(self.index, self.buffer.tail(self.chunk).copy())
        return outcome

    def run(self, target):
        """Sample until target accepted samples are stored"""
        self.buffer.grow(target)
        progress = Ticker(target)
        while self.accepted < target:
            if self.step() != REJECTED and progress.tick(self.accepted):
                self._report("Chain {}: done {} samples ({}%)".format(str(self.index), str(self.accepted), str(progress.now)))
        return self.accepted


def sample_round(chains, target):
    """Run every chain until it holds target samples.

    Chains run as tasks of a thread pool with one worker per chain.
    Exceptions raised inside a chain are re-raised here.
    """
    logger.debug("Sampling {} chains up to {} samples".format(str(len(chains)), str(target)))
    with concurrent.futures.ThreadPoolExecutor(max_workers=len(chains)) as pool:
        futures = [pool.submit(chain.run, target) for chain in chains]
        return [future.result() for future in futures]
