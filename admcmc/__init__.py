"""
admcmc
======

Adaptive Metropolis MCMC. A package to sample the posterior distribution
of the parameters of non-linear models, given a likelihood function, a
starting parameter set and the bounds of each parameter. The step sizes of
the proposals are tuned automatically during a burn-in, then several
chains are sampled in parallel until the Gelman-Rubin statistic shows
that they converged.

Features
--------

* Burn-in tuning of the step size of each parameter towards an acceptance
ratio between 0.234 and 0.441
* Parallel chains, extended until sqrt(R) < 1.1 for every parameter
* Change one, half or all of the parameters per proposal
* Likelihood or log-likelihood, parameters can be held fixed with a mask
* Reproducible runs with explicit seeds

Usage
-----

The likelihood is called with a parameter set and an estimate of the
standard deviation of the data, for example:

```python
import numpy as np
import admcmc

def loglike(p, sigma):
    return -0.5 * np.sum((p - [1., 2., 3.]) ** 2) / sigma ** 2

bounds = np.array([[-10., 10.]] * 3)

sampler = admcmc.Mcmc(loglike, loglike=True)
burnin_paras, mcmc_paras = sampler.sample(np.zeros(3), bounds, seeds=[1, 2, 3], chains=4)
```

`mcmc_paras` holds the accepted parameter sets of all chains, one set per
row. Pass `stepsize` to skip the burn-in, `maskpara` to hold parameters
fixed and `para_select_mode="all"` to change all parameters at once.
"""

from admcmc import logs  # noqa: F401
from admcmc.errors import ConfigurationError
from admcmc.proposal import HALF, ONE, ALL
from admcmc.sampler import Mcmc, mcmc
from admcmc.diagnostics import gelman_rubin
__version__ = "0.1"
