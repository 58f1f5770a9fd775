"""
Shared fixtures: small random variables, joint distributions and Bayesian networks.
"""

import numpy as np
import pytest
from bnrevise.dist import RandomVariable, JointDistribution
from bnrevise.network import TabularBayesianNetwork


@pytest.fixture
def A():
    return RandomVariable("A", ["a0", "a1"])


@pytest.fixture
def B():
    return RandomVariable("B", ["b0", "b1"])


@pytest.fixture
def C():
    return RandomVariable("C", ["c0", "c1", "c2"])


@pytest.fixture
def uniform_ab(A, B):
    """Uniform joint over two binary variables"""
    return JointDistribution.uniform([A, B])


@pytest.fixture
def random_abc(A, B, C):
    """A strictly positive joint over A, B, C"""
    rng = np.random.default_rng(42)
    values = rng.uniform(0.1, 1.0, size=(2, 2, 3))
    return JointDistribution([A, B, C], values / values.sum())


@pytest.fixture
def chain_network():
    """A -> B -> C, all binary"""
    return TabularBayesianNetwork.from_dict({
        "A": {"states": ["a0", "a1"], "cpt": [0.6, 0.4]},
        "B": {"states": ["b0", "b1"], "parents": ["A"], "cpt": [[0.7, 0.3], [0.2, 0.8]]},
        "C": {"states": ["c0", "c1"], "parents": ["B"], "cpt": [[0.9, 0.1], [0.4, 0.6]]},
    })


@pytest.fixture
def triangle_network():
    """A -> B, A -> C, B -> C, all binary"""
    return TabularBayesianNetwork.from_dict({
        "A": {"states": ["a0", "a1"], "cpt": [0.5, 0.5]},
        "B": {"states": ["b0", "b1"], "parents": ["A"], "cpt": [[0.8, 0.2], [0.3, 0.7]]},
        "C": {"states": ["c0", "c1"], "parents": ["A", "B"],
              "cpt": [[[0.9, 0.1], [0.6, 0.4]], [[0.5, 0.5], [0.1, 0.9]]]},
    })


@pytest.fixture
def sprinkler_network():
    """The classic Cloudy -> {Sprinkler, Rain} -> WetGrass network"""
    return TabularBayesianNetwork.from_dict({
        "Cloudy": {"states": ["no", "yes"], "cpt": [0.5, 0.5]},
        "Sprinkler": {"states": ["off", "on"], "parents": ["Cloudy"], "cpt": [[0.5, 0.5], [0.9, 0.1]]},
        "Rain": {"states": ["no", "yes"], "parents": ["Cloudy"], "cpt": [[0.8, 0.2], [0.2, 0.8]]},
        "WetGrass": {"states": ["dry", "wet"], "parents": ["Sprinkler", "Rain"],
                     "cpt": [[[1.0, 0.0], [0.1, 0.9]], [[0.1, 0.9], [0.01, 0.99]]]},
    })
