import logging
import time
from dataclasses import dataclass
from bnrevise.errors import InvalidArgumentError, NonConvergenceError
from bnrevise.dist import JointDistribution, total_variation
from bnrevise.ipfp.constraint import as_constraints

logger = logging.getLogger(__name__)


@dataclass
class IPFPResult:
    """
    distribution: the revised joint distribution
    iterations: number of outer passes over the constraints
    distance: total variation between the last two passes
    elapsed: wall-clock time in seconds
    """
    distribution: JointDistribution
    iterations: int
    distance: float
    elapsed: float


def check_budget(max_loops: int, threshold: float, tolerance: float):
    """
    threshold bounds a total variation without the 1/2 factor, which lies in [0, 2];
    tolerance bounds a difference between two probabilities, which lies in [0, 1].
    """
    if max_loops < 1:
        raise InvalidArgumentError(f"I need max_loops >= 1, got {max_loops}")
    if not 0.0 <= threshold <= 2.0:
        raise InvalidArgumentError(f"I need a threshold in [0, 2], got {threshold}")
    if not 0.0 <= tolerance <= 1.0:
        raise InvalidArgumentError(f"I need a tolerance in [0, 1], got {tolerance}")


def max_violation(constraints, q: JointDistribution) -> float:
    """The largest deviation of `q` from any of the constraints"""
    return max(constraint.violation(q) for constraint in constraints)


def run_ipfp(initial: JointDistribution, constraints, max_loops=100, threshold=1e-6, tolerance=0.01) -> IPFPResult:
    """
    Revise a joint distribution so that it satisfies a set of marginal and/or conditional constraints.

    Each pass applies every constraint once, in the order given, each projection seeing the effect of
     the previous one. The loop stops as soon as a pass changes the distribution by at most `threshold`
     (total variation) and the result deviates from no constraint by more than `tolerance`.
    Otherwise it raises NonConvergenceError after `max_loops` passes: constraints that cannot hold together
     keep the loop from stopping even when the passes stop changing the distribution.

    initial: the starting joint Q_0 (not modified)
    constraints: constraint objects, or bare JointDistribution (marginal) / ConditionalDistribution (conditional)
        tables over variables of `initial`
    max_loops: the maximum number of passes
    threshold: convergence threshold on the total variation between successive passes
    tolerance: the largest violation (see Constraint.violation) accepted at convergence
    """
    constraints = as_constraints(constraints)
    check_budget(max_loops, threshold, tolerance)
    start = time.perf_counter()
    q = initial.copy()
    distance = float('inf')
    for iteration in range(1, max_loops + 1):
        q_prev = q
        for constraint in constraints:
            q = constraint.project(q)
        distance = total_variation(q_prev, q)
        violation = max_violation(constraints, q)
        logger.debug("IPFP pass %d: total variation %g, violation %g", iteration, distance, violation)
        # conditional constraints see nothing wrong in a table without mass
        if q.sum() <= 0:
            logger.debug("IPFP pass %d: the distribution has lost all of its mass", iteration)
        elif distance <= threshold and violation <= tolerance:
            elapsed = time.perf_counter() - start
            logger.info("IPFP converged in %d pass(es) (%.3fs)", iteration, elapsed)
            return IPFPResult(q, iteration, distance, elapsed)
    raise NonConvergenceError(
        f"The set of constraints did not converge in {max_loops} loops", max_loops, distance)
