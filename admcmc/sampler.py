import logging

import numpy as np

from admcmc import proposal
from admcmc.burnin import BurnIn
from admcmc.chains import BestRecord, Chain, sample_round
from admcmc.diagnostics import THRESHOLD, converged, gelman_rubin
from admcmc.errors import ConfigurationError
from admcmc.logs import reporter
from admcmc.sinks import TextSink
from admcmc.streams import ChainStreams, chain_seeds

logger = logging.getLogger(__name__)


def _unit_stddev(paras):
    return 1.


class Mcmc(object):
    """
    Adaptive Metropolis MCMC sampler.

    :Parameters:
        -  likelihood : callable
            likelihood(paras, sigma) of a parameter set, or its logarithm
            if loglike is True.
        -  stddev_function : callable
            Estimate of the standard deviation of the data for a parameter
            set, passed as sigma to the likelihood. Constant 1 if None.
        -  loglike : bool
            True if likelihood returns the log-likelihood.
    """

    def __init__(self, likelihood, stddev_function=None, loglike=False):
        self.likelihood = likelihood
        self.stddev_function = stddev_function if stddev_function is not None else _unit_stddev
        self.loglike = bool(loglike)
        logger.debug("MCMC sampler created with loglike={}.".format(str(self.loglike)))

    def sample(self, para, bounds, seeds=None, printflag=False, maskpara=None, tmp_file=None, sink=None,
               para_select_mode=proposal.ONE, iter_burnin=None, iter_mcmc=None, chains=5, stepsize=None):
        """Sample the posterior distribution of the parameters.

        :Parameters:
            -  para : array
                Initial parameter set.
            -  bounds : array
                (npar, 2) array with the lower and upper bound of each parameter.
            -  seeds : array
                Seeds of the random numbers, 3 per chain. A single row gives
                the seeds of the first chain, the others follow from it.
                Time-derived if None.
            -  printflag : bool
                Report progress on the terminal.
            -  maskpara : array
                True for the parameters to sample, all by default.
            -  tmp_file : str
                Write the samples of chain i to "<i>_<tmp_file>" during sampling.
            -  sink : object
                Alternative to tmp_file, any object with write(chain, samples).
            -  para_select_mode : int or str
                Parameters changed per proposal: 1 or "half", 2 or "one",
                3 or "all".
            -  iter_burnin : int
                Length of the burn-in Markov chains, max(250, 1000 * nfree) by default.
            -  iter_mcmc : int
                Samples per chain added in every sampling round, 1000 * nfree by default.
            -  chains : int
                Number of parallel chains, at least 2.
            -  stepsize : array
                Step size of each parameter. Skips the burn-in if given.

        Return the accepted parameter sets of the burn-in and of the
        posterior sampling of all chains, one row per set.
        """
        self.para = np.array(para, dtype=float)
        self.npar = len(self.para)
        self.printflag = bool(printflag)
        self._report = reporter(logger, self.printflag)
        self._check_config(bounds, maskpara, para_select_mode, iter_burnin, iter_mcmc, chains, stepsize)

        self._report("Following parameters will be sampled with MCMC: {}".format(str(self.truepara)))
        self.seeds = chain_seeds(seeds, self.nchains)
        logger.debug("Seeds of the chains are: {}".format(str(self.seeds.tolist())))
        self.streams = [ChainStreams(s) for s in self.seeds]
        if sink is None and tmp_file is not None:
            sink = TextSink(tmp_file)
        self.sink = sink

        self.sigma = self.stddev_function(self.para)
        self.best = BestRecord(self.para, self.likelihood(self.para, self.sigma))

        if self.stepsize is None:
            self._report("Starting burn-in (iter_burnin = {})".format(str(self.iter_burnin)))
            burnin = BurnIn(self.likelihood, self.stddev_function, self.best, self.bounds, self.truepara,
                            self.streams[0], self.iter_burnin, mode=self.mode, loglike=self.loglike,
                            printflag=self.printflag)
            self.stepsize = burnin.run()
            self.sigma = burnin.sigma
            burnin_paras = burnin.samples()
        else:
            burnin_paras = np.zeros((0, self.npar))

        mcmc_paras = self._sample_chains()
        means = np.mean([chain.buffer.averages() for chain in self.chains], axis=0)
        logger.info("Sampling finished: {} samples, posterior mean {}".format(str(len(mcmc_paras)), str(means)))
        return burnin_paras, mcmc_paras

    def _check_config(self, bounds, maskpara, para_select_mode, iter_burnin, iter_mcmc, chains, stepsize):
        """Validate the configuration, fill in the defaults"""
        if maskpara is None:
            self.maskpara = np.ones(self.npar, dtype=bool)
        else:
            self.maskpara = np.array(maskpara, dtype=bool)
            if self.maskpara.shape != (self.npar,):
                raise ConfigurationError("maskpara must have one entry per parameter.")
            if not self.maskpara.any():
                raise ConfigurationError("At least one element of maskpara has to be true.")
        self.truepara = np.flatnonzero(self.maskpara)
        nfree = len(self.truepara)

        self.bounds = np.array(bounds, dtype=float)
        if self.bounds.shape != (self.npar, 2):
            raise ConfigurationError("bounds must have shape ({}, 2), got {}".format(str(self.npar), str(self.bounds.shape)))
        if np.any(self.bounds[:, 0] >= self.bounds[:, 1]):
            raise ConfigurationError("Lower bounds must be smaller than upper bounds.")
        outside = (self.para < self.bounds[:, 0]) | (self.para > self.bounds[:, 1])
        if outside.any():
            raise ConfigurationError("Initial parameters {} are outside their bounds.".format(str(np.flatnonzero(outside))))

        self.mode = proposal.select_mode(para_select_mode)

        if iter_burnin is None:
            self.iter_burnin = max(250, 1000 * nfree)
        else:
            self.iter_burnin = int(iter_burnin)
            if self.iter_burnin <= 0:
                raise ConfigurationError("iter_burnin must be greater than 0.")
        if iter_mcmc is None:
            self.iter_mcmc = 1000 * nfree
        else:
            self.iter_mcmc = int(iter_mcmc)
            if self.iter_mcmc <= 0:
                raise ConfigurationError("iter_mcmc must be greater than 0.")
        self.increment = self.iter_mcmc

        self.nchains = int(chains)
        if self.nchains < 2:
            raise ConfigurationError("chains must be at least 2.")

        if stepsize is None:
            self.stepsize = None
        else:
            stepsize = np.array(stepsize, dtype=float)
            if stepsize.shape == (self.npar,):
                self.stepsize = stepsize
            elif stepsize.shape == (nfree,):
                self.stepsize = np.ones(self.npar)
                self.stepsize[self.truepara] = stepsize
            else:
                raise ConfigurationError("stepsize must have one entry per parameter or per free parameter.")
            if np.any(self.stepsize[self.truepara] <= 0.):
                raise ConfigurationError("stepsize must be positive for all sampled parameters.")

    def _sample_chains(self):
        """Sample all chains until the Gelman-Rubin statistic passes"""
        self._report("Starting MCMC (chains = {}, iter_mcmc = {})".format(str(self.nchains), str(self.iter_mcmc)))
        start = self.best.paras
        self.chains = [Chain(i, self.likelihood, self.sigma, self.streams[i], start, self.bounds, self.truepara,
                             self.stepsize, mode=self.mode, loglike=self.loglike, best=self.best,
                             sink=self.sink, chunk=self.increment, printflag=self.printflag)
                       for i in range(self.nchains)]
        self.rounds = 0
        while True:
            sample_round(self.chains, self.iter_mcmc)
            self.rounds += 1
            n_end = min(chain.accepted for chain in self.chains)
            samples = np.array([chain.buffer.samples()[:n_end] for chain in self.chains])
            self._report("Checking for convergence ....")
            self.sqrt_r = gelman_rubin(samples, self.truepara, n_end)
            for i, r in enumerate(self.sqrt_r):
                if r < THRESHOLD:
                    self._report("   sqrtR para #{} : {}".format(str(i), str(r)))
                else:
                    self._report("   sqrtR para #{} : {}  <-- FAILED".format(str(i), str(r)))
            if converged(self.sqrt_r):
                self._report("   --> converged (all less than {})".format(str(THRESHOLD)))
                break
            self.iter_mcmc += self.increment
            self._report("   --> not converged, increasing iterations to {}".format(str(self.iter_mcmc)))
        return np.concatenate([chain.buffer.samples() for chain in self.chains])

    @property
    def parabest(self):
        return self.best.paras

    @property
    def likelibest(self):
        return self.best.likelihood


def mcmc(likelihood, stddev_function, para, bounds, loglike=False, **kwargs):
    """Sample the posterior with a new Mcmc sampler, see Mcmc.sample.

    Return the burn-in and the posterior parameter sets.
    """
    sampler = Mcmc(likelihood, stddev_function, loglike=loglike)
    return sampler.sample(para, bounds, **kwargs)
