r"""Gelman-Rubin convergence diagnostic.

For every free parameter, using the second half of each chain
(1-based rows :math:`n_{end}/2 + 1` to :math:`n_{end}`, :math:`m` rows):

.. math::
    W & = \frac{1}{J} \sum_j s_j^2

    B & = \frac{m}{J-1} \sum_j (\bar{x}_j - \bar{x})^2

    \sqrt{R} & = \sqrt{\frac{\frac{m-1}{m} W + \frac{1}{m} B}{W}}

with :math:`J` chains, chain means :math:`\bar{x}_j` and sample variances
:math:`s_j^2`.
"""
import logging

import numpy as np

logger = logging.getLogger(__name__)

THRESHOLD = 1.1


def gelman_rubin(samples, truepara=None, n_end=None):
    """Return sqrt(R) of every parameter.

    :Parameters:
        -  samples : array
            (chains, n, npar) accepted samples of every chain.
        -  truepara : array
            Indices of the free parameters, all parameters if None.
            Fixed parameters get 0.
        -  n_end : int
            Number of samples used from each chain, the minimum
            accepted count over the chains. Defaults to n.
    """
    samples = np.asarray(samples, dtype=float)
    chains, n, npar = samples.shape
    if truepara is None:
        truepara = np.arange(npar)
    if n_end is None:
        n_end = n
    n_start = n_end // 2
    half = samples[:, n_start:n_end, :][:, :, truepara]
    m = half.shape[1]
    sqrt_r = np.zeros(npar)
    with np.errstate(divide="ignore", invalid="ignore"):
        means = half.mean(axis=1)
        B = m / (chains - 1.) * ((means - means.mean(axis=0)) ** 2).sum(axis=0)
        W = half.var(axis=1, ddof=1).mean(axis=0)
        sqrt_r[truepara] = np.sqrt(((m - 1.) / m * W + B / m) / W)
    logger.debug("Gelman-Rubin with {} chains and {} samples: W = {}, B = {}".format(str(chains), str(m), str(W), str(B)))
    return sqrt_r


def converged(sqrt_r, threshold=THRESHOLD):
    """True if sqrt(R) is below threshold for every parameter"""
    return bool(np.all(np.asarray(sqrt_r) < threshold))
