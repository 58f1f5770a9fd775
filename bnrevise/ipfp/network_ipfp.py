import logging
import time
from bnrevise.errors import NonConvergenceError
from bnrevise.dist import total_variation
from bnrevise.network.convert import network_to_joint, joint_to_network
from bnrevise.ipfp.constraint import as_constraints
from bnrevise.ipfp.loop import IPFPResult, check_budget, max_violation

logger = logging.getLogger(__name__)


def run_network_ipfp(network, constraints, max_loops=100, threshold=1e-6, tolerance=0.01) -> IPFPResult:
    """
    Revise the CPTs of `network` in place by IPFP over its full joint distribution.

    Each pass extracts the full joint, projects it onto every constraint once (in the order given),
     writes Q(node | parents) back for every node, and re-extracts the joint.
    The loop stops once the joint before and after a pass differ by at most `threshold` (total variation)
     and the network deviates from no constraint by more than `tolerance`,
     and raises NonConvergenceError after `max_loops` passes otherwise.

    Unlike run_decomposed_ipfp this builds the whole joint table, so it only suits small networks.
    The result holds the network's final joint distribution.
    """
    constraints = as_constraints(constraints)
    check_budget(max_loops, threshold, tolerance)
    start = time.perf_counter()
    network.compile()
    distance = float('inf')
    for iteration in range(1, max_loops + 1):
        before = network_to_joint(network)
        q = before
        for constraint in constraints:
            q = constraint.project(q)
        joint_to_network(q, network)
        after = network_to_joint(network)
        distance = total_variation(before, after)
        violation = max_violation(constraints, after)
        logger.debug("network IPFP pass %d: total variation %g, violation %g", iteration, distance, violation)
        if distance <= threshold and violation <= tolerance:
            elapsed = time.perf_counter() - start
            logger.info("network IPFP converged in %d pass(es) (%.3fs)", iteration, elapsed)
            return IPFPResult(after, iteration, distance, elapsed)
    raise NonConvergenceError(
        f"The set of constraints did not converge in {max_loops} loops", max_loops, distance)
