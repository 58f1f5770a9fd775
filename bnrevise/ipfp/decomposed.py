"""
Decomposed (graph-local) IPFP: revise the CPTs of a Bayesian network in place
without ever building the network's full joint distribution.

For each constraint over Y we only look at the joint over Y' and its closure S,
 project it onto the constraint, and write Q(y | parents(y)) back for every y in Y'.
Passes over all constraints repeat until the joint over the variables the constraints
 touch (with their closures) stops changing and every constraint holds within a tolerance.

The algorithm comes in eight variations, which differ along three independent choices,
 captured by DecompositionConfig:

    closure         LOOSE (parents of Y) or STRICT (parents of Y, promoting those that descend from Y)
    inner           SINGLE_PASS (one projection per constraint) or ITERATE (repeat until the
                    local joint settles within inner_tolerance)
    local_shortcut  update the target CPT of local constraints directly, skipping the closure
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
import numpy as np
from bnrevise.errors import InvalidArgumentError, NonConvergenceError
from bnrevise.dist import total_variation
from bnrevise.graph import loose_closure, strict_closure
from bnrevise.network.convert import network_to_joint, write_conditional
from bnrevise.ipfp.constraint import Constraint, MarginalConstraint, ConditionalConstraint, as_constraints
from bnrevise.ipfp.loop import check_budget

logger = logging.getLogger(__name__)


class ClosureKind(Enum):
    LOOSE = "loose"
    STRICT = "strict"


class InnerPolicy(Enum):
    SINGLE_PASS = "single_pass"
    ITERATE = "iterate"


@dataclass(frozen=True)
class DecompositionConfig:
    """
    closure: how to bound the local joint of a constraint
    inner: whether to repeat the projection of a constraint until the local joint settles
    local_shortcut: update the concept's CPT directly for local constraints
    inner_tolerance: the inner loop stops once the local joint moves by at most this much (total variation),
        or, for the local shortcut, once the constraint is violated by at most this much
    max_inner_loops: the inner loop raises NonConvergenceError after this many projections
    """
    closure: ClosureKind = ClosureKind.LOOSE
    inner: InnerPolicy = InnerPolicy.ITERATE
    local_shortcut: bool = True
    inner_tolerance: float = 0.005
    max_inner_loops: int = 100

    def __post_init__(self):
        if not isinstance(self.closure, ClosureKind):
            raise InvalidArgumentError(f"Expected a ClosureKind, got {self.closure!r}")
        if not isinstance(self.inner, InnerPolicy):
            raise InvalidArgumentError(f"Expected an InnerPolicy, got {self.inner!r}")
        if self.inner_tolerance < 0:
            raise InvalidArgumentError(f"I need inner_tolerance >= 0, got {self.inner_tolerance}")
        if self.max_inner_loops < 1:
            raise InvalidArgumentError(f"I need max_inner_loops >= 1, got {self.max_inner_loops}")

    @classmethod
    def variation(cls, n: int, **kwargs) -> 'DecompositionConfig':
        """
        The configuration of variation n (1 to 8):
            1-4 use the local shortcut, 5-8 do not;
            3, 4, 7, 8 use the strict closure, the others the loose one;
            even variations iterate each constraint, odd ones project it once.
        Variation 2 is the default configuration.
        """
        if n not in range(1, 9):
            raise InvalidArgumentError(f"Variations are numbered 1 to 8, got {n}")
        return cls(
            closure=ClosureKind.STRICT if n in (3, 4, 7, 8) else ClosureKind.LOOSE,
            inner=InnerPolicy.ITERATE if n % 2 == 0 else InnerPolicy.SINGLE_PASS,
            local_shortcut=n <= 4,
            **kwargs)

    @property
    def number(self) -> int:
        """The variation number (1 to 8) of this configuration"""
        n = 1 if self.local_shortcut else 5
        if self.closure is ClosureKind.STRICT:
            n += 2
        if self.inner is InnerPolicy.ITERATE:
            n += 1
        return n


@dataclass
class DecompositionResult:
    """
    iterations: number of outer passes over the constraints
    distance: total variation of the relevant joint between the last two passes
    elapsed: wall-clock time in seconds
    """
    iterations: int
    distance: float
    elapsed: float


def constraint_closure(network, constraint: Constraint, kind: ClosureKind):
    """Return (Y', S): the variables whose CPTs a constraint revises, and the closure that completes them"""
    names = list(constraint.names)
    if kind is ClosureKind.STRICT:
        return strict_closure(network, names)
    return names, loose_closure(network, names)


def check_local(network, constraint: Constraint):
    """A local constraint talks about its concept and (some of) the concept's parents"""
    concept = constraint.concept
    if not network.has_node(concept):
        raise InvalidArgumentError(f"The network does not contain a node named {concept}")
    parents = network.parents(concept)
    for name in constraint.context:
        if name not in parents:
            raise InvalidArgumentError(f"{name} is not a parent of {concept}, the constraint is not local")
    if isinstance(constraint, ConditionalConstraint) and not parents:
        raise InvalidArgumentError(f"{concept} has no parents, it cannot take a local conditional constraint")


def check_evidence(network, constraints, config: DecompositionConfig, evidence: dict):
    """
    Hard evidence only enters through the local shortcut: every constraint must be local
     and none may mention an observed node.
    """
    network.evidence_indices(evidence)
    if not config.local_shortcut:
        raise InvalidArgumentError("Hard evidence needs a configuration with the local shortcut (variations 1-4)")
    for constraint in constraints:
        if not constraint.is_local:
            raise InvalidArgumentError(f"{constraint!r} is nonlocal, only local constraints can be revised under evidence")
        observed = [name for name in constraint.names if name in evidence]
        if observed:
            raise InvalidArgumentError(f"{constraint!r} mentions the observed node(s) {observed}")


class ConstraintStep:
    """One constraint, planned against the structure of a network"""

    def __init__(self, network, constraint: Constraint, config: DecompositionConfig, evidence=None):
        self.constraint = constraint
        self.config = config
        self.evidence = evidence or None
        self.shortcut = config.local_shortcut and constraint.is_local
        if self.shortcut:
            check_local(network, constraint)
        self.updated, self.closure = constraint_closure(network, constraint, config.closure)
        self.names = list(self.updated) + list(self.closure)
        for rv in constraint.variables:
            if rv != network.variable(rv.name):
                raise InvalidArgumentError(f"{rv!r} does not match the states of node {rv.name} in the network")

    def apply(self, network):
        """Revise the network for this constraint, return the number of projections made"""
        for inner in range(1, self.config.max_inner_loops + 1):
            if self.shortcut:
                distance = self._local_update(network)
            else:
                distance = self._closure_update(network)
            if self.config.inner is InnerPolicy.SINGLE_PASS:
                return inner
            logger.debug("%r, inner loop %d: distance %g", self.constraint, inner, distance)
            if distance <= self.config.inner_tolerance:
                return inner
        raise NonConvergenceError(
            f"{self.constraint!r} did not settle in {self.config.max_inner_loops} inner loops",
            self.config.max_inner_loops, distance)

    def violation(self, network) -> float:
        """How far the network (given the evidence, if any) is from satisfying the constraint"""
        return self.constraint.violation(network_to_joint(network, self.constraint.names, self.evidence))

    def _closure_update(self, network) -> float:
        q = network_to_joint(network, self.names)
        projected = self.constraint.project(q)
        for y in self.updated:
            write_conditional(network, projected, y)
        network.compile()
        if self.config.inner is InnerPolicy.SINGLE_PASS:
            return 0.0
        return total_variation(projected, network_to_joint(network, self.names))

    def _local_update(self, network) -> float:
        concept = self.constraint.concept
        parents = network.parents(concept)
        if not parents and self.evidence is None:
            # a parentless concept only takes a marginal over itself
            network.set_cpt(concept, self.constraint.distribution.normalized().values)
            network.compile()
            return self._inner_distance(network)
        context = list(self.constraint.context)
        if isinstance(self.constraint, MarginalConstraint):
            # R(l, c) / Q(l, c | e)
            target = self.constraint.distribution.marginalize(context + [concept]).values
            current = network.joint_beliefs(context + [concept], self.evidence)
        else:
            # R(c | l) / Q(c | l, e), both with the conditions first
            context = list(self.constraint.cond_names)
            target = self.constraint.distribution.values
            current = network_to_joint(network, context + [concept], self.evidence).conditional(
                [concept], context).values
        factor = np.divide(target, current, out=np.zeros_like(current), where=current > 0)
        positions = [parents.index(name) for name in context]
        kept = 0
        for parent_indices in network.parent_assignments(concept):
            row = network.get_cpt(concept, parent_indices) * factor[tuple(parent_indices[i] for i in positions)]
            Z = row.sum()
            if Z > 0:
                network.set_cpt(concept, row / Z, parent_indices)
            else:
                kept += 1
        if kept:
            logger.warning("%d row(s) of the CPT of %s have no mass and keep their previous values", kept, concept)
        network.compile()
        return self._inner_distance(network)

    def _inner_distance(self, network) -> float:
        if self.config.inner is InnerPolicy.SINGLE_PASS:
            return 0.0
        return self.violation(network)


def run_decomposed_ipfp(network, constraints, max_loops=100, threshold=1e-4, config=None,
                        tolerance=0.01, evidence=None) -> DecompositionResult:
    """
    Revise the CPTs of `network` in place so that it satisfies a set of constraints.

    network: a BeliefNetwork, used exclusively by this call until it returns
    constraints: constraint objects, or bare JointDistribution / ConditionalDistribution tables
        (treated as nonlocal) over nodes of the network
    max_loops: the maximum number of passes over the constraints
    threshold: the loop stops once a pass changes the joint over the relevant variables
        (all constrained variables and their closures) by at most this much (total variation)
    tolerance: the largest violation of any constraint (see Constraint.violation) accepted at convergence
    config: a DecompositionConfig, defaults to variation 2
    evidence: optional hard evidence (node name -> state label). Each local constraint is then fitted
        against the posterior, e.g. Q_k(c | pa) is proportional to Q_{k-1}(c | pa) R(c) / Q_{k-1}(c | e).
        Needs the local shortcut, and local constraints that do not mention observed nodes.

    Raises NonConvergenceError if the passes (or the inner loop of one constraint) run out of budget,
     in which case the network is left with the CPTs of the last pass.
    """
    config = DecompositionConfig() if config is None else config
    constraints = as_constraints(constraints)
    check_budget(max_loops, threshold, tolerance)
    if evidence:
        check_evidence(network, constraints, config, evidence)
    start = time.perf_counter()
    network.compile()
    steps = [ConstraintStep(network, constraint, config, evidence) for constraint in constraints]
    relevant = []
    for step in steps:
        for name in step.names:
            if name not in relevant:
                relevant.append(name)
    logger.info("decomposed IPFP (variation %d) over %d constraint(s), %d relevant variable(s)",
                config.number, len(steps), len(relevant))

    snapshot = network_to_joint(network, relevant)
    distance = float('inf')
    for iteration in range(1, max_loops + 1):
        for step in steps:
            inner = step.apply(network)
            logger.debug("pass %d: %r took %d projection(s)", iteration, step.constraint, inner)
        current = network_to_joint(network, relevant)
        distance = total_variation(snapshot, current)
        violation = max(step.violation(network) for step in steps)
        logger.debug("pass %d: total variation %g, violation %g", iteration, distance, violation)
        if distance <= threshold and violation <= tolerance:
            elapsed = time.perf_counter() - start
            logger.info("decomposed IPFP converged in %d pass(es) (%.3fs)", iteration, elapsed)
            return DecompositionResult(iteration, distance, elapsed)
        snapshot = current
    raise NonConvergenceError(
        f"The set of constraints did not converge in {max_loops} loops", max_loops, distance)
