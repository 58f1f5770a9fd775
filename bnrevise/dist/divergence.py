"""
Distances between two joint distributions over the same variables.

The variables of the two distributions are matched by name, so their order may differ;
their states must agree.
"""
import math
import numpy as np
from bnrevise.dist.joint import JointDistribution

# returned by cross_entropy when P is not absolutely continuous w.r.t. Q
UNDEFINED_DIVERGENCE = math.inf


def is_undefined(divergence: float) -> bool:
    """Check for the sentinel returned by cross_entropy"""
    return math.isinf(divergence)


def total_variation(p: JointDistribution, q: JointDistribution) -> float:
    r"""
    The total variation between two discrete distributions P and Q over the same rvs X, here taken as
        \sum_{x\in Val(X)} |P(X=x) - Q(X=x)|
    (without the 1/2 factor, which makes it the L1 distance between the two tables).
    """
    return float(np.abs(p.values - p.aligned_values(q)).sum())


def cross_entropy(p: JointDistribution, q: JointDistribution) -> float:
    r"""
    The KL-divergence (cross entropy) of Q from P, in bits:
        \sum_{x: P(x) > 0} P(x) log2(P(x) / Q(x))

    If some x has P(x) > 0 but Q(x) = 0, the divergence is undefined and
    UNDEFINED_DIVERGENCE is returned, check it with is_undefined before using the value.
    """
    p_values = p.values
    q_values = p.aligned_values(q)
    support = p_values > 0
    if np.any(q_values[support] <= 0):
        return UNDEFINED_DIVERGENCE
    ps = p_values[support]
    return float(np.sum(ps * np.log2(ps / q_values[support])))
