import logging
import time
import pandas as pd
from joblib import Parallel, delayed
from bnrevise.errors import NonConvergenceError
from bnrevise.dist import total_variation, cross_entropy
from bnrevise.network.convert import network_to_joint
from bnrevise.ipfp.constraint import as_constraints
from bnrevise.ipfp.decomposed import DecompositionConfig, run_decomposed_ipfp

logger = logging.getLogger(__name__)


def run_strategy(network, constraints, config: DecompositionConfig, max_loops, threshold, tolerance) -> dict:
    """Run one configuration on a copy of the network, return one row of the comparison"""
    original = network_to_joint(network)
    revised_net = network.copy()
    start = time.perf_counter()
    try:
        result = run_decomposed_ipfp(revised_net, constraints, max_loops, threshold, config, tolerance)
        converged, iterations, distance = True, result.iterations, result.distance
    except NonConvergenceError as e:
        converged, iterations, distance = False, e.iterations, e.distance
    elapsed = time.perf_counter() - start
    revised_net.compile()
    revised = network_to_joint(revised_net)
    return {
        "variation": config.number,
        "closure": config.closure.value,
        "inner": config.inner.value,
        "local_shortcut": config.local_shortcut,
        "converged": converged,
        "iterations": iterations,
        "distance": distance,
        "elapsed": elapsed,
        "tv": total_variation(original, revised),
        "kl": cross_entropy(revised, original),
        "max_violation": max(c.violation(revised) for c in constraints),
    }


def compare_strategies(network, constraints, configs=None, max_loops=100, threshold=1e-4, tolerance=0.01,
                       n_jobs=1) -> pd.DataFrame:
    """
    Run the decomposed algorithm once per configuration, each on its own copy of the network
     (the network itself is not modified), in parallel with joblib.

    network: a network supporting copy() (e.g. TabularBayesianNetwork)
    constraints, max_loops, threshold, tolerance: as in run_decomposed_ipfp
    configs: DecompositionConfig objects, all eight variations by default
    n_jobs: number of joblib workers (-1 for all cores)

    Return a DataFrame with one row per configuration: the variation settings, whether it converged,
     the number of passes, the last distance, the elapsed time, the total variation (tv) and
     the KL divergence (kl, in bits) of the revised network's joint from the original,
     and the largest deviation from any constraint (max_violation).
    """
    constraints = as_constraints(constraints)
    if configs is None:
        configs = [DecompositionConfig.variation(n) for n in range(1, 9)]
    logger.info("comparing %d configuration(s) with n_jobs=%d", len(configs), n_jobs)
    rows = Parallel(n_jobs=n_jobs, backend="loky")(
        delayed(run_strategy)(network, constraints, config, max_loops, threshold, tolerance)
        for config in configs
    )
    return pd.DataFrame(rows)
