r"""
Single-constraint IPFP steps (I-projections).

Given the current joint Q(X) and a constraint over S \subseteq X,
 each function returns a new (unnormalised in general) joint distribution
 whose marginal (or conditional) over S matches the constraint.
The input Q is never modified.

Wherever the current distribution puts no mass on the constrained event the scaling
 ratio is taken to be 0, so those entries stay at (or drop to) 0.
"""
import numpy as np
from bnrevise.dist import JointDistribution, ConditionalDistribution
from bnrevise.dist.tensor import marginal_values, broadcast_values


def project_marginal(q: JointDistribution, r: JointDistribution) -> JointDistribution:
    r"""
    IPFP step for a marginal constraint R(S):

        Q_new(x) = Q(x) R(s) / Q(s)

    where s is the restriction of x to S, and R(s)/Q(s) is taken to be 0 if Q(s) = 0.
    """
    s = [rv.name for rv in q.resolve(r.variables, "constrained variables")]
    q_s = marginal_values(q.values, q.names, s)
    ratio = np.divide(r.values, q_s, out=np.zeros_like(q_s), where=q_s > 0)
    new_values = q.values * broadcast_values(ratio, s, list(q.names))
    return JointDistribution(q.variables, new_values)


def project_conditional(q: JointDistribution, r: ConditionalDistribution) -> JointDistribution:
    r"""
    Conditional IPFP step for a constraint R(S | L):

        Q_new(x) = Q(x) R(s|l) / Q(s|l)

    where Q(s|l) = Q(s, l) / Q(l) (0 if Q(l) = 0), and the ratio is taken to be 0 if Q(s|l) = 0.
    """
    q.resolve(r.variables, "constrained variables")
    # both tables have the conditions first, then the priors
    names = list(r.names)
    q_sl = marginal_values(q.values, q.names, names)
    q_l = marginal_values(q.values, q.names, list(r.cond_names))
    q_l = q_l.reshape(q_l.shape + (1,) * len(r.priors))
    q_cond = np.divide(q_sl, q_l, out=np.zeros_like(q_sl), where=q_l > 0)
    ratio = np.divide(r.values, q_cond, out=np.zeros_like(q_cond), where=q_cond > 0)
    new_values = q.values * broadcast_values(ratio, names, list(q.names))
    return JointDistribution(q.variables, new_values)
