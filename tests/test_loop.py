"""
Tests for ipfp/loop.py - the multi-constraint IPFP loop over a full joint.
"""

import numpy as np
import pytest
from bnrevise.errors import InvalidArgumentError, NonConvergenceError
from bnrevise.dist import JointDistribution, ConditionalDistribution
from bnrevise.ipfp import run_ipfp, MarginalConstraint, ConditionalConstraint


class TestRunIPFP:
    """Tests for run_ipfp()"""

    def test_single_marginal_converges(self, uniform_ab, A):
        result = run_ipfp(uniform_ab, [JointDistribution([A], [0.7, 0.3])], max_loops=10, threshold=1e-9)
        np.testing.assert_allclose(result.distribution.marginalize(["A"]).values, [0.7, 0.3])
        # the second pass changes nothing
        assert result.iterations == 2
        assert result.distance == pytest.approx(0.0, abs=1e-12)
        assert result.elapsed >= 0.0

    def test_two_marginals(self, random_abc, A, C):
        constraints = [
            MarginalConstraint(JointDistribution([A], [0.3, 0.7])),
            MarginalConstraint(JointDistribution([C], [0.2, 0.3, 0.5])),
        ]
        result = run_ipfp(random_abc, constraints, max_loops=200, threshold=1e-10)
        q = result.distribution
        np.testing.assert_allclose(q.marginalize(["A"]).values, [0.3, 0.7], atol=1e-6)
        np.testing.assert_allclose(q.marginalize(["C"]).values, [0.2, 0.3, 0.5], atol=1e-6)
        assert q.is_valid()

    def test_marginal_and_conditional(self, random_abc, A, B):
        constraints = [
            JointDistribution([A], [0.4, 0.6]),
            ConditionalDistribution([B], [A], [0.9, 0.1, 0.3, 0.7]),
        ]
        result = run_ipfp(random_abc, constraints, max_loops=200, threshold=1e-10)
        q = result.distribution
        np.testing.assert_allclose(q.marginalize(["A"]).values, [0.4, 0.6], atol=1e-6)
        np.testing.assert_allclose(q.conditional(["B"], ["A"]).values, [[0.9, 0.1], [0.3, 0.7]], atol=1e-6)

    def test_initial_not_modified(self, uniform_ab, A):
        run_ipfp(uniform_ab, [JointDistribution([A], [0.7, 0.3])])
        np.testing.assert_allclose(uniform_ab.values, 0.25)

    def test_contradictory_constraints(self, uniform_ab, A):
        """Two incompatible marginals over the same variable end in NonConvergenceError."""
        constraints = [
            MarginalConstraint(JointDistribution([A], [1.0, 0.0])),
            MarginalConstraint(JointDistribution([A], [0.0, 1.0])),
        ]
        with pytest.raises(NonConvergenceError) as excinfo:
            run_ipfp(uniform_ab, constraints, max_loops=5, threshold=1e-6)
        assert excinfo.value.iterations == 5

    def test_conflicting_marginals(self, uniform_ab, A):
        """Every pass ends on the same table but the first marginal never holds, so the run fails."""
        constraints = [
            MarginalConstraint(JointDistribution([A], [0.7, 0.3])),
            MarginalConstraint(JointDistribution([A], [0.3, 0.7])),
        ]
        with pytest.raises(NonConvergenceError) as excinfo:
            run_ipfp(uniform_ab, constraints, max_loops=5, threshold=1e-6)
        assert excinfo.value.iterations == 5

    def test_violation_tolerance(self, uniform_ab, A):
        """Near-compatible marginals converge when the leftover violation is within tolerance."""
        constraints = [JointDistribution([A], [0.5, 0.5]), JointDistribution([A], [0.505, 0.495])]
        # the first marginal is off by 0.005 on each state after every pass
        result = run_ipfp(uniform_ab, constraints, max_loops=10, threshold=1e-9, tolerance=0.02)
        assert result.iterations == 2
        with pytest.raises(NonConvergenceError):
            run_ipfp(uniform_ab, constraints, max_loops=10, threshold=1e-9, tolerance=0.001)

    def test_threshold_above_one(self, uniform_ab, A):
        """Total variation ranges over [0, 2], so a threshold of 1.5 is a (loose) budget, not an error."""
        result = run_ipfp(uniform_ab, [JointDistribution([A], [0.7, 0.3])], max_loops=10, threshold=1.5)
        assert result.iterations == 1

    def test_budget_exhausted(self, random_abc, A, B):
        constraints = [
            ConditionalConstraint(ConditionalDistribution([A], [B], [0.9, 0.1, 0.2, 0.8])),
            MarginalConstraint(JointDistribution([A], [0.5, 0.5])),
        ]
        with pytest.raises(NonConvergenceError):
            run_ipfp(random_abc, constraints, max_loops=1, threshold=0.0)

    @pytest.mark.parametrize("max_loops,threshold,tolerance", [
        (0, 1e-3, 0.01), (10, -1.0, 0.01), (10, 2.5, 0.01), (10, 1e-3, -0.1), (10, 1e-3, 1.5),
    ])
    def test_invalid_budget(self, uniform_ab, A, max_loops, threshold, tolerance):
        with pytest.raises(InvalidArgumentError):
            run_ipfp(uniform_ab, [JointDistribution([A], [0.7, 0.3])], max_loops, threshold, tolerance)

    def test_no_constraints(self, uniform_ab):
        with pytest.raises(InvalidArgumentError):
            run_ipfp(uniform_ab, [])
