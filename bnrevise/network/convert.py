"""
Moving between a network's CPTs and an explicit joint distribution.

network_to_joint reads beliefs off the network, write_conditional and joint_to_network
derive CPT rows Q(node | parents) from a joint and write them back.
"""
import logging
from bnrevise.dist import JointDistribution

logger = logging.getLogger(__name__)


def network_to_joint(network, variables=None, evidence=None) -> JointDistribution:
    """
    The network's current joint distribution over `variables` (names, in the order given),
    or over all of its nodes when `variables` is None.

    evidence: optional hard evidence (node name -> state label), the result is then the posterior
        over `variables`, or over every node that is not observed when `variables` is None
    """
    if variables is None:
        names = [name for name in network.nodes() if not evidence or name not in evidence]
    else:
        names = list(variables)
    return JointDistribution(network.variables(names), network.joint_beliefs(names, evidence))


def write_conditional(network, joint: JointDistribution, node: str) -> int:
    """
    Replace the CPT of `node` by Q(node | parents(node)) derived from `joint`,
    normalising each row. A parentless node gets the normalised marginal Q(node).

    The joint must contain the node and all of its parents (with the network's states).
    Rows conditioned on a parent assignment of zero mass cannot be derived,
     they keep their previous values.

    The network is not recompiled, call network.compile() once all writes are done.

    Return the number of rows that kept their previous values.
    """
    parents = network.parents(node)
    target = network.variables([node])
    if not parents:
        marginal = joint.marginalize(target).values
        Z = marginal.sum()
        if Z > 0:
            network.set_cpt(node, marginal / Z)
            return 0
        logger.warning("the marginal of %s has no mass, its CPT is left unchanged", node)
        return 1
    # axes: parents (in the network's order), then the node
    cond = joint.conditional(target, network.variables(parents))
    totals = cond.values.sum(axis=-1)
    kept = 0
    for parent_indices in network.parent_assignments(node):
        total = totals[parent_indices]
        if total > 0:
            network.set_cpt(node, cond.values[parent_indices] / total, parent_indices)
        else:
            kept += 1
    if kept:
        logger.warning("%d row(s) of the CPT of %s have no mass and keep their previous values", kept, node)
    return kept


def joint_to_network(joint: JointDistribution, network, nodes=None):
    """
    Write Q(node | parents) into the network for every node (or the given ones),
    compiling after each write so the network is consistent when this returns.
    """
    nodes = list(network.nodes()) if nodes is None else list(nodes)
    for node in nodes:
        write_conditional(network, joint, node)
        network.compile()
