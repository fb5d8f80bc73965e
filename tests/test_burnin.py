"""
Tests for the burn-in step size tuning.
"""

import numpy as np
import pytest

from admcmc import proposal
from admcmc.burnin import ACC_MULT, ACC_RATIO_HIGH, ACC_RATIO_LOW, LOOKBACK, REJ_MULT, BurnIn
from admcmc.chains import REJECTED, BestRecord
from admcmc.streams import ChainStreams


def _loglike1(paras, sigma):
    return -0.5 * (paras[0] - 0.5) ** 2 / 0.04


class CountingStddev(object):

    def __init__(self):
        self.calls = []

    def __call__(self, paras):
        self.calls.append(np.array(paras))
        return 1.


@pytest.fixture
def bounds1():
    return np.array([[-10., 10.]])


def _burnin(loglike, bounds, iter_burnin=1000, mode=proposal.ONE, stddev=None, start=None, seeds=(1, 2, 3)):
    if start is None:
        start = np.zeros(bounds.shape[0])
    best = BestRecord(start, loglike(start, 1.))
    return BurnIn(loglike, stddev or (lambda p: 1.), best, bounds, np.arange(bounds.shape[0]),
                  ChainStreams(seeds), iter_burnin, mode=mode, loglike=True)


class TestStep:

    @pytest.mark.parametrize("mode", [proposal.ONE, proposal.HALF, proposal.ALL])
    def test_multiplier_law(self, gaussian_loglike, bounds3, mode):
        """Each changed step size is scaled by exactly one multiplier per proposal"""
        burnin = _burnin(gaussian_loglike, bounds3, mode=mode)
        burnin.start_trial()
        for _ in range(500):
            before = burnin.stepsize.copy()
            outcome = burnin.step()
            ratio = burnin.stepsize / before
            assert np.all(burnin.stepsize > 0.)
            unchanged = np.isclose(ratio, 1.)
            if outcome == REJECTED:
                np.testing.assert_allclose(ratio[~unchanged], REJ_MULT)
            else:
                np.testing.assert_allclose(ratio[~unchanged], ACC_MULT)
            assert (~unchanged).sum() >= 1

    def test_accepted_sets_are_stored(self, gaussian_loglike, bounds3):
        burnin = _burnin(gaussian_loglike, bounds3, iter_burnin=300)
        ratio = burnin.trial()
        assert len(burnin.samples()) == burnin.n_pos + burnin.n_neg
        assert ratio == pytest.approx(len(burnin.samples()) / 300.)

    def test_improvement_is_flagged(self, gaussian_loglike, bounds3):
        burnin = _burnin(gaussian_loglike, bounds3, iter_burnin=500)
        burnin.trial()
        assert burnin.improved
        assert burnin.best.likelihood > gaussian_loglike(np.zeros(3), 1.)


class TestEvaluate:

    def test_low_ratio(self, bounds1):
        burnin = _burnin(_loglike1, bounds1)
        burnin.history.append(0.3)
        assert not burnin.evaluate(0.1)
        assert burnin.acc_mult == pytest.approx(ACC_MULT * 0.99)
        assert len(burnin.history) == 0

    def test_high_ratio(self, bounds1):
        burnin = _burnin(_loglike1, bounds1)
        burnin.history.append(0.3)
        assert not burnin.evaluate(0.6)
        assert burnin.acc_mult == pytest.approx(ACC_MULT * 1.01)
        assert len(burnin.history) == 0

    def test_band_edges_are_in_band(self, bounds1):
        burnin = _burnin(_loglike1, bounds1)
        burnin.evaluate(ACC_RATIO_LOW)
        burnin.evaluate(ACC_RATIO_HIGH)
        assert list(burnin.history) == [ACC_RATIO_LOW, ACC_RATIO_HIGH]
        assert burnin.acc_mult == ACC_MULT

    def test_stable_ratios_stop(self, bounds1):
        burnin = _burnin(_loglike1, bounds1)
        results = [burnin.evaluate(0.3 + 0.001 * (i % 2)) for i in range(LOOKBACK)]
        assert results == [False] * (LOOKBACK - 1) + [True]

    def test_unstable_ratios_continue(self, bounds1):
        burnin = _burnin(_loglike1, bounds1)
        results = [burnin.evaluate(0.25 + 0.18 * (i % 2)) for i in range(2 * LOOKBACK)]
        assert not any(results)
        assert len(burnin.history) == LOOKBACK


class TestRestart:

    def test_restart_resets_tuning(self, bounds1):
        stddev = CountingStddev()
        burnin = _burnin(_loglike1, bounds1, stddev=stddev)
        burnin.trial()
        burnin.evaluate(0.1)
        burnin.history.append(0.3)
        burnin.best.update([0.5], 0.)
        burnin.restart()
        np.testing.assert_array_equal(burnin.stepsize, [1.])
        assert burnin.acc_mult == ACC_MULT
        assert len(burnin.history) == 0
        assert len(burnin.samples()) == 0
        assert burnin.attempts == 2
        assert not burnin.improved
        np.testing.assert_array_equal(stddev.calls[-1], [0.5])
        assert burnin.best.likelihood == _loglike1(np.array([0.5]), 1.)


class TestRun:

    def test_tunes_acceptance_ratio(self, bounds1):
        burnin = _burnin(_loglike1, bounds1, iter_burnin=1000)
        stepsize = burnin.run()
        assert stepsize.shape == (1,)
        assert stepsize[0] > 0.
        assert not burnin.improved
        assert len(burnin.history) == LOOKBACK
        assert np.all(np.array(burnin.history) >= ACC_RATIO_LOW)
        assert np.all(np.array(burnin.history) <= ACC_RATIO_HIGH)
        assert np.std(burnin.history, ddof=1) < np.sqrt(1. / 12. * 0.05 ** 2)
        samples = burnin.samples()
        assert len(samples) > 0
        assert np.all(samples >= -10.) and np.all(samples <= 10.)

    def test_reproducible(self, bounds1):
        a = _burnin(_loglike1, bounds1, iter_burnin=500).run()
        b = _burnin(_loglike1, bounds1, iter_burnin=500).run()
        np.testing.assert_array_equal(a, b)
