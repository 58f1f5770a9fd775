from .constraint import Scope, Constraint, MarginalConstraint, ConditionalConstraint, as_constraint
from .projection import project_marginal, project_conditional
from .loop import IPFPResult, run_ipfp
from .decomposed import (
    ClosureKind,
    InnerPolicy,
    DecompositionConfig,
    DecompositionResult,
    run_decomposed_ipfp,
)
from .network_ipfp import run_network_ipfp
from .parallel import compare_strategies

__all__ = [
    "Scope",
    "Constraint",
    "MarginalConstraint",
    "ConditionalConstraint",
    "as_constraint",
    "project_marginal",
    "project_conditional",
    "IPFPResult",
    "run_ipfp",
    "ClosureKind",
    "InnerPolicy",
    "DecompositionConfig",
    "DecompositionResult",
    "run_decomposed_ipfp",
    "run_network_ipfp",
    "compare_strategies",
]
