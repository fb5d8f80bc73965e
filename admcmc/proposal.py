"""Generation of candidate parameter sets."""
import logging

import numpy as np

from admcmc.errors import ConfigurationError

logger = logging.getLogger(__name__)

# How many parameters are changed per jump
HALF = 1
ONE = 2
ALL = 3

_MODE_NAMES = {"half": HALF, "one": ONE, "all": ALL}


def select_mode(mode):
    """Return the numeric parameter selection mode for mode (int or name)"""
    if isinstance(mode, str):
        try:
            return _MODE_NAMES[mode.lower()]
        except KeyError:
            raise ConfigurationError("Unknown parameter selection mode: {}".format(mode))
    mode = int(mode)
    if mode not in (HALF, ONE, ALL):
        raise ConfigurationError("Parameter selection mode must be 1 (half), 2 (one) or 3 (all), got {}".format(str(mode)))
    return mode


def parameter_step(old, stepsize, pmin, pmax, rn):
    """Move one parameter by rn * stepsize in normalized space.

    The value is normalized into [0,1] using its bounds, moved, clipped
    into [0,1] and mapped back. Return the new value and whether it
    stayed strictly inside the bounds.
    """
    scaled = (old - pmin) / (pmax - pmin) + rn * stepsize
    inbound = True
    if scaled <= 0.:
        scaled = 0.
        inbound = False
    elif scaled >= 1.:
        scaled = 1.
        inbound = False
    return scaled * (pmax - pmin) + pmin, inbound


def _change(paranew, changed, ipar, paraold, bounds, stepsize, step):
    value, inbound = parameter_step(paraold[ipar], stepsize[ipar], bounds[ipar, 0], bounds[ipar, 1], step.next_gaussian())
    paranew[ipar] = value
    changed[ipar] = True
    return inbound


def _pick(truepara, select):
    return truepara[int(select.next_uniform() * len(truepara))]


def generate(mode, paraold, truepara, bounds, stepsize, select, step):
    """Generate a new parameter set from paraold.

    :Parameters:
        -  mode : int
            HALF, ONE or ALL.
        -  paraold : array
            Current parameter set.
        -  truepara : array
            Indices of the free parameters.
        -  bounds : array
            (npar, 2) array of lower and upper bounds.
        -  stepsize : array
            Step size of each parameter in normalized units.
        -  select : RandomStream
            Uniform numbers deciding which parameters change.
        -  step : RandomStream
            Gaussian numbers for the perturbations.

    Return the new parameter set and the mask of changed parameters.
    """
    paranew = np.array(paraold, dtype=float)
    changed = np.zeros(len(paranew), dtype=bool)
    if mode == ONE:
        _change(paranew, changed, _pick(truepara, select), paraold, bounds, stepsize, step)
    elif mode == HALF:
        for ipar in truepara:
            if select.next_uniform() > 0.5:
                _change(paranew, changed, ipar, paraold, bounds, stepsize, step)
        if not changed.any():
            _change(paranew, changed, _pick(truepara, select), paraold, bounds, stepsize, step)
    elif mode == ALL:
        # regenerate until strictly inside the bounds, no clipping in this mode
        for ipar in truepara:
            while not _change(paranew, changed, ipar, paraold, bounds, stepsize, step):
                pass
    else:
        raise ConfigurationError("Unknown parameter selection mode: {}".format(str(mode)))
    return paranew, changed
