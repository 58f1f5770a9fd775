import numpy as np
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist import total_variation
from bnrevise.network.convert import network_to_joint


def network_total_variation(net1, net2) -> float:
    """Total variation between the full joints of two networks over the same nodes (and states)"""
    return total_variation(network_to_joint(net1), network_to_joint(net2))


def belief_difference(net1, net2, evidence=None) -> float:
    """
    Compare two networks (same nodes, typically the same DAG with different CPTs) node by node:
    for each node, the absolute difference between the two belief vectors averaged over the node's states,
     summed over all nodes.

    evidence: optional hard evidence (node name -> state label); posterior beliefs are compared instead,
        and the observed nodes are left out
    """
    nodes = list(net1.nodes())
    if set(nodes) != set(net2.nodes()):
        raise InvalidArgumentError("I can only compare networks with the same nodes")
    evidence = evidence or {}
    diff = 0.0
    for node in nodes:
        if net1.states(node) != net2.states(node):
            raise InvalidArgumentError(f"Node {node} has different states in the two networks")
        if node in evidence:
            continue
        diff += float(np.mean(np.abs(net1.beliefs(node, evidence) - net2.beliefs(node, evidence))))
    return diff
