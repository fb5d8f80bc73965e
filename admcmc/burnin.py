"""Burn-in: tuning of the step sizes before posterior sampling.

Short Markov chains of fixed length are run from the best parameter set.
During a chain the step size of every changed parameter is multiplied by
the acceptance multiplier on acceptance and by the rejection multiplier on
rejection. After each chain the acceptance multiplier is adjusted until the
acceptance ratio stays within [0.234, 0.441]. The step sizes are tuned when
the last 10 acceptance ratios, all within that band, have a standard
deviation below sqrt(1/12 * 0.05**2).

Whenever a better parameter set is found the tuning starts again from it,
so step sizes are never tuned around a stale optimum.
"""
import collections
import logging

import numpy as np

from admcmc import proposal
from admcmc.chains import NEGATIVE, POSITIVE, REJECTED, SampleBuffer, accept_decision
from admcmc.logs import reporter

logger = logging.getLogger(__name__)

ACC_MULT = 1.01
REJ_MULT = 0.99
ACC_RATIO_LOW = 0.234
ACC_RATIO_HIGH = 0.441
LOOKBACK = 10
ACC_RATIO_STDDEV = np.sqrt(1. / 12. * 0.05 ** 2)


class BurnIn(object):
    """Step size tuning controller.

    :Parameters:
        -  likelihood : callable
            likelihood(paras, sigma), or its logarithm if loglike.
        -  stddev_function : callable
            Estimate of the standard deviation of the data, called with the
            best parameter set at every (re)start.
        -  best : BestRecord
            Shared best parameter set.
        -  bounds : array
            (npar, 2) lower and upper bounds.
        -  truepara : array
            Indices of the free parameters.
        -  streams : ChainStreams
            Random streams, those of the first chain.
        -  iter_burnin : int
            Length of each trial Markov chain.
    """

    def __init__(self, likelihood, stddev_function, best, bounds, truepara, streams, iter_burnin,
                 mode=proposal.ONE, loglike=False, printflag=False):
        self.likelihood = likelihood
        self.stddev_function = stddev_function
        self.best = best
        self.bounds = bounds
        self.truepara = truepara
        self.streams = streams
        self.iter_burnin = int(iter_burnin)
        self.mode = mode
        self.loglike = loglike
        self._report = reporter(logger, printflag)
        self.npar = bounds.shape[0]
        self.buffer = SampleBuffer(self.npar, self.iter_burnin)
        self.attempts = 0
        self.restart()

    def restart(self):
        """Start tuning again from the best parameter set"""
        self.stepsize = np.ones(self.npar)
        self.acc_mult = ACC_MULT
        self.rej_mult = REJ_MULT
        self.history = collections.deque(maxlen=LOOKBACK)
        self.buffer.clear()
        self.trials = 0
        self.improved = False
        self.attempts += 1
        parabest = self.best.paras
        self.sigma = self.stddev_function(parabest)
        self.best.reset_likelihood(self.likelihood(parabest, self.sigma))
        self._report("Restart burn-in with new approximation of std.dev. of data: stddev = {}, likelihood = {}".format(
            str(self.sigma), str(self.best.likelihood)))

    def start_trial(self):
        self.p, self.likeli = self.best.snapshot()
        self.n_pos = 0
        self.n_neg = 0

    def step(self):
        """One proposal of the trial chain with step size adaptation. Return the outcome."""
        paranew, changed = proposal.generate(self.mode, self.p, self.truepara, self.bounds, self.stepsize,
                                             self.streams.select, self.streams.step)
        likelinew = self.likelihood(paranew, self.sigma)
        outcome = accept_decision(likelinew, self.likeli, self.loglike, self.streams.accept)
        if outcome == REJECTED:
            self.stepsize[changed] *= self.rej_mult
            return outcome
        if outcome == POSITIVE:
            self.n_pos += 1
        elif outcome == NEGATIVE:
            self.n_neg += 1
        self.p = paranew
        self.likeli = likelinew
        self.stepsize[changed] *= self.acc_mult
        self.buffer.add(paranew)
        if outcome == POSITIVE and self.best.update(paranew, likelinew):
            self.improved = True
            self._report("Best para changed: {} with likelihood {}".format(str(paranew), str(likelinew)))
        return outcome

    def trial(self):
        """Run one Markov chain of iter_burnin proposals. Return the acceptance ratio."""
        self.start_trial()
        for _ in range(self.iter_burnin):
            self.step()
        self.trials += 1
        return float(self.n_pos + self.n_neg) / self.iter_burnin

    def evaluate(self, ratio):
        """Adjust the acceptance multiplier to ratio. Return True when the step sizes are tuned."""
        if ratio < ACC_RATIO_LOW:
            self.acc_mult *= 0.99
            self.history.clear()
        elif ratio > ACC_RATIO_HIGH:
            self.acc_mult *= 1.01
            self.history.clear()
        else:
            self.history.append(ratio)
        if len(self.history) >= LOOKBACK:
            return np.std(self.history, ddof=1) < ACC_RATIO_STDDEV
        return False

    def run(self):
        """Tune the step sizes. Return them."""
        while True:
            tuned = False
            while not (tuned or self.improved):
                ratio = self.trial()
                tuned = self.evaluate(ratio)
                self._report("Trial #{}: acc_ratio = {:.3f} (stepsize = {})".format(
                    str(self.trials), ratio, str(self.stepsize[self.truepara])))
            if not self.improved:
                break
            self.restart()
        self._report("Stop burn-in with acceptance ratio of {:.3f} after {} attempts".format(self.history[-1], str(self.attempts)))
        self._report("Final stepsize: {}".format(str(self.stepsize[self.truepara])))
        return self.stepsize

    def samples(self):
        """Accepted parameter sets of the final tuning attempt"""
        return self.buffer.samples().copy()
