"""
Revision of Bayesian network CPTs by iterative proportional fitting.

The most common entry points are re-exported here; submodules (dist, graph, network, ipfp, util)
 can also be loaded by name with `load`.

Every module logs to a logger named after it (e.g. "bnrevise.ipfp.decomposed").
The library never configures logging; to see loop outcomes, configure it in your application, e.g.:
    logging.basicConfig(level=logging.INFO)
"""
import logging

__version__ = "0.1.0"
__author__ = "bnrevise contributors"
__license__ = "MIT"

from bnrevise.errors import InvalidArgumentError, NonConvergenceError
from bnrevise.dist import RandomVariable, JointDistribution, ConditionalDistribution, total_variation, cross_entropy
from bnrevise.network import TabularBayesianNetwork
from bnrevise.ipfp import (
    MarginalConstraint,
    ConditionalConstraint,
    Scope,
    DecompositionConfig,
    run_ipfp,
    run_decomposed_ipfp,
    run_network_ipfp,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())


def load(module_name: str):
    """
    Load a submodule by name, e.g.:
        util = bnrevise.load("util")
    """
    import importlib
    return importlib.import_module(f"bnrevise.{module_name}")
