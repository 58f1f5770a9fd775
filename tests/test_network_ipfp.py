"""
Tests for ipfp/network_ipfp.py - full-joint IPFP written back to a network.
"""

import numpy as np
import pytest
from bnrevise.errors import NonConvergenceError
from bnrevise.dist import JointDistribution, ConditionalDistribution
from bnrevise.ipfp import run_network_ipfp, run_decomposed_ipfp


class TestRunNetworkIPFP:
    """Tests for run_network_ipfp()"""

    def test_marginal(self, chain_network):
        target = JointDistribution(chain_network.variables(["C"]), [0.5, 0.5])
        result = run_network_ipfp(chain_network, [target], max_loops=500, threshold=1e-8)
        np.testing.assert_allclose(chain_network.beliefs("C"), [0.5, 0.5], atol=1e-3)
        np.testing.assert_allclose(
            result.distribution.marginalize(["C"]).values, chain_network.beliefs("C"))
        assert result.distribution.is_valid()

    def test_conditional(self, sprinkler_network):
        target = ConditionalDistribution(
            sprinkler_network.variables(["Rain"]), sprinkler_network.variables(["Cloudy"]),
            [[0.7, 0.3], [0.4, 0.6]])
        run_network_ipfp(sprinkler_network, [target], max_loops=100, threshold=1e-8)
        np.testing.assert_allclose(sprinkler_network.get_cpt("Rain", (0,)), [0.7, 0.3], atol=1e-6)
        np.testing.assert_allclose(sprinkler_network.get_cpt("Rain", (1,)), [0.4, 0.6], atol=1e-6)

    def test_revises_parents_of_constrained_variables(self, chain_network):
        """Unlike the decomposed algorithm, the full joint projection also moves A"""
        target = JointDistribution(chain_network.variables(["B", "C"]), [[0.1, 0.2], [0.3, 0.4]])
        other = chain_network.copy()
        run_network_ipfp(chain_network, [target], max_loops=500, threshold=1e-9)
        run_decomposed_ipfp(other, [target], max_loops=500, threshold=1e-7)
        np.testing.assert_allclose(chain_network.joint_beliefs(["B", "C"]), target.values, atol=1e-6)
        np.testing.assert_allclose(other.joint_beliefs(["B", "C"]), target.values, atol=1e-3)
        # P(a | b) is kept, so P(a) = sum_b P(a | b) R(b) = [0.84 * 0.3 + 0.36 * 0.7, ...]
        np.testing.assert_allclose(chain_network.beliefs("A"), [0.504, 0.496], atol=1e-6)
        np.testing.assert_allclose(other.beliefs("A"), [0.6, 0.4])

    def test_contradictory_constraints(self, chain_network):
        A = chain_network.variable("A")
        constraints = [JointDistribution([A], [1.0, 0.0]), JointDistribution([A], [0.0, 1.0])]
        with pytest.raises(NonConvergenceError) as excinfo:
            run_network_ipfp(chain_network, constraints, max_loops=5)
        assert excinfo.value.iterations == 5

    def test_conflicting_marginals(self, chain_network):
        """The network stops changing after one pass, yet A = [0.7, 0.3] never holds with A = [0.3, 0.7]"""
        A = chain_network.variable("A")
        constraints = [JointDistribution([A], [0.7, 0.3]), JointDistribution([A], [0.3, 0.7])]
        with pytest.raises(NonConvergenceError) as excinfo:
            run_network_ipfp(chain_network, constraints, max_loops=5)
        assert excinfo.value.iterations == 5
        np.testing.assert_allclose(chain_network.beliefs("A"), [0.3, 0.7])
