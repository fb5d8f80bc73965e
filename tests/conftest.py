"""
Pytest configuration and shared fixtures for admcmc tests.
"""

import pytest
import numpy as np


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: complete burn-in and sampling runs")


class FixedStream(object):
    """Stream returning the same uniform number, counting the draws."""

    def __init__(self, value):
        self.value = value
        self.draws = 0

    def next_uniform(self):
        self.draws += 1
        return self.value

    def next_gaussian(self):
        self.draws += 1
        return self.value


def make_gaussian_loglike(mu, cov):
    mu = np.asarray(mu, dtype=float)
    precision = np.linalg.inv(np.asarray(cov, dtype=float))

    def loglike(paras, sigma):
        d = paras - mu
        return -0.5 * d.dot(precision).dot(d)
    return loglike


@pytest.fixture
def fixed_stream():
    return FixedStream


@pytest.fixture
def mu():
    return np.array([1., 2., 3.])


@pytest.fixture
def cov():
    return np.array([[0.1, 0.02, 0.],
                     [0.02, 0.1, 0.],
                     [0., 0., 0.05]])


@pytest.fixture
def gaussian_loglike(mu, cov):
    """Log-likelihood of a 3-d gaussian around mu"""
    return make_gaussian_loglike(mu, cov)


@pytest.fixture
def bounds3():
    return np.array([[-10., 10.]] * 3)


@pytest.fixture
def seeds():
    """Default seeds for reproducible tests."""
    return [42, 4242, 424242]
