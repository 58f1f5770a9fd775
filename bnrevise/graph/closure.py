"""
Closures of a set of variables in a Bayesian network.

A closure is the set of extra variables whose joint distribution (together with the
variables themselves) must be known to recompute the CPTs of the variables.

Both functions only use the network's parent relation (network.parents(name)),
so they work with any BeliefNetwork.
"""
import logging
from collections import deque
from bnrevise.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def _check_names(network, names):
    names = list(names)
    if len(names) == 0:
        raise InvalidArgumentError("I need at least one variable to compute a closure")
    for name in names:
        if not network.has_node(name):
            raise InvalidArgumentError(f"The network does not contain a node named {name}")
    return names


def is_descendant(network, node: str, ancestor: str) -> bool:
    """
    Return True if `node` is a (strict) descendant of `ancestor`,
    walking parent edges upward from `node`.
    """
    visited = set()
    queue = deque(network.parents(node))
    while queue:
        p = queue.popleft()
        if p == ancestor:
            return True
        if p in visited:
            continue
        visited.add(p)
        queue.extend(network.parents(p))
    return False


def loose_closure(network, variables) -> list:
    """
    Return the union of the parents of the variables, minus the variables themselves
    (one level of parents, no further expansion), in order of discovery.
    """
    variables = _check_names(network, variables)
    members = set(variables)
    closure = []
    for name in variables:
        for p in network.parents(name):
            if p not in members and p not in closure:
                closure.append(p)
    return closure


def strict_closure(network, variables):
    """
    Return (updated, closure) where `updated` extends the variables with every node of the
    loose closure that is itself a descendant of one of the variables (applied until no such node is left),
    and `closure` holds the remaining parents of `updated`, disjoint from `updated`.

    Every parent of a node in `updated` is either in `updated` or in `closure`,
    so the joint over updated + closure is enough to recompute every CPT in `updated`.
    The procedure terminates because the graph is acyclic and each promotion moves one node into `updated`.
    """
    variables = _check_names(network, variables)
    updated = list(variables)
    closure = loose_closure(network, variables)
    promoted = True
    while promoted:
        promoted = False
        next_closure = []
        for s in closure:
            if s in updated:  # a parent of an earlier promotion may since have been promoted itself
                continue
            if any(is_descendant(network, s, y) for y in updated):
                # Y = Y + {s} and S = S - {s} + Pa(s) \ Y
                updated.append(s)
                promoted = True
                for p in network.parents(s):
                    if p not in updated and p not in closure and p not in next_closure:
                        next_closure.append(p)
            elif s not in next_closure:
                next_closure.append(s)
        closure = [s for s in next_closure if s not in updated]
    assert all(p in updated or p in closure for y in updated for p in network.parents(y)), \
        "Every parent of an updated node must be updated or in the closure"
    logger.debug("strict closure of %s: updated=%s, closure=%s", variables, updated, closure)
    return updated, closure
