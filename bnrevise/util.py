import pandas as pd
import numpy as np
from tabulate import tabulate
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist import RandomVariable, JointDistribution, ConditionalDistribution
from bnrevise.network.convert import network_to_joint


def joint_to_df(joint: JointDistribution, prob_col="P") -> pd.DataFrame:
    """
    Return a pandas DataFrame with one row per joint assignment (one column per variable, holding state labels)
    and its probability in `prob_col`.
    """
    table = []
    joint_states = RandomVariable.enumerate_joint_states(*joint.variables)
    for states, value in zip(joint_states, joint.values.flatten()):
        table.append(list(states) + [value])
    return pd.DataFrame(table, columns=list(joint.names) + [prob_col])


def df_to_joint(df, variables, prob_col="P", miss_value=0.0) -> JointDistribution:
    """
    Convert a DataFrame (e.g. from joint_to_df) to a JointDistribution over `variables` (RandomVariable objects).
    Note that this makes the representation dense (missing assignments in the DataFrame get `miss_value`).
    """
    variables = tuple(variables)
    shape = [len(rv) for rv in variables]
    tensor = np.zeros(shape, dtype=float) + miss_value
    for _, row in df.iterrows():
        idx = tuple(rv.index(row[rv.name]) for rv in variables)
        tensor[idx] = row[prob_col]
    return JointDistribution(variables, tensor)


def conditional_to_df(cond: ConditionalDistribution, prob_col="P") -> pd.DataFrame:
    """One row per assignment of conds and priors (conds first), with its conditional probability"""
    table = []
    joint_states = RandomVariable.enumerate_joint_states(*cond.variables)
    for states, value in zip(joint_states, cond.values.flatten()):
        table.append(list(states) + [value])
    return pd.DataFrame(table, columns=list(cond.names) + [prob_col])


def network_to_df(network, nodes=None, prob_col="P") -> pd.DataFrame:
    """
    Return a pandas DataFrame containing a complete table-view of the joint distribution represented by a network.

    nodes: optionally specify which nodes (and in which order) to list in the table
    """
    return joint_to_df(network_to_joint(network, nodes), prob_col=prob_col)


def beliefs_to_df(network) -> pd.DataFrame:
    """One row per (node, state) with the node's current marginal belief"""
    table = []
    for node in network.nodes():
        for state, p in zip(network.states(node), network.beliefs(node)):
            table.append([node, state, p])
    return pd.DataFrame(table, columns=["node", "state", "belief"])


def display_full_table(network, nodes=None, tablefmt='simple'):
    """
    Return a tabulate-formatted string that can be printed to display the whole joint table of a network.

    nodes: optionally specify the order in which to list nodes in the table
    """
    joint = network_to_joint(network, nodes)
    return joint.display(tablefmt=tablefmt)


def display_cpt(network, node: str, tablefmt='simple'):
    """Return a tabulate-formatted view of the CPT of a node, one row per assignment of its parents"""
    if not network.has_node(node):
        raise InvalidArgumentError(f"The network does not contain a node named {node}")
    parents = network.parents(node)
    headers = list(parents) + [f"{node}={s}" for s in network.states(node)]
    table = []
    for parent_indices in network.parent_assignments(node):
        ctxt = [network.states(p)[i] for p, i in zip(parents, parent_indices)]
        table.append(ctxt + list(network.get_cpt(node, parent_indices)))
    return tabulate(table, headers=headers, tablefmt=tablefmt)
