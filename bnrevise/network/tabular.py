import copy
import functools
import logging
import numpy as np
from tabulate import tabulate
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist import RandomVariable, JointDistribution
from bnrevise.dist.tensor import marginal_values
from bnrevise.graph import DAG
from bnrevise.network.base import BeliefNetwork
from bnrevise.network.factor import TabularFactor, TabularCPDFactor

logger = logging.getLogger(__name__)


class TabularBayesianNetwork(BeliefNetwork):
    """
    A BN combines a DAG (bnrevise.graph.DAG)
     and a collection of CPDs (TabularCPDFactor objects).

    Beliefs are exact: compile() multiplies all CPD factors into the full joint table,
     so this is only meant for networks whose joint fits comfortably in memory.

    After set_cpt the beliefs are stale, and any belief query raises RuntimeError
     until compile() is called again.
    """

    def __init__(self, cpd_factors: 'iterable', tol=1e-6):
        """
        cpd_factors: a collection of TabularCPDFactor objects
            the class builds the BN structure by analysing the factors
        tol: tolerance used when checking that CPT rows add up to 1.0
        """
        super().__init__()
        self.tol = tol
        self.cpds = dict()
        self.rvs = dict()
        nodes = []
        edges = []
        for cpd in cpd_factors:
            if not isinstance(cpd, TabularCPDFactor):
                raise InvalidArgumentError("BNs are parameterised by CPD factors, here they must be tabular.")
            if cpd.child in self.cpds:
                raise InvalidArgumentError(f"Node {cpd.child} has more than one CPD")
            self.cpds[cpd.child] = cpd
            self.rvs[cpd.child] = cpd.variables[cpd.child]
            nodes.append(cpd.child)
            for parent in cpd.parents:
                edges.append((parent, cpd.child))
        if len(nodes) == 0:
            raise InvalidArgumentError("A BN needs at least one node")
        self.dag = DAG(nodes, edges)
        for cpd in self.cpds.values():
            for parent in cpd.parents:
                if cpd.variables[parent] != self.rvs[parent]:
                    raise InvalidArgumentError(
                        f"The CPD of {cpd.child} disagrees with the states of its parent {parent}")
        self._joint = None
        self.compile()

    @classmethod
    def from_dict(cls, description: dict, tol=1e-6) -> 'TabularBayesianNetwork':
        """
        Build a network from a dict mapping each node name to a dict with keys

            states: list of state labels
            parents: list of parent names (optional, defaults to no parents)
            cpt: nested lists (or an array) of shape [cardinality of each parent] + [number of states]

        Example:

            TabularBayesianNetwork.from_dict({
                'A': {'states': ['a0', 'a1'], 'cpt': [0.3, 0.7]},
                'B': {'states': ['b0', 'b1'], 'parents': ['A'], 'cpt': [[0.9, 0.1], [0.2, 0.8]]},
            })
        """
        rvs = {name: RandomVariable(name, node['states']) for name, node in description.items()}
        factors = []
        for name, node in description.items():
            parents = tuple(node.get('parents', ()))
            for parent in parents:
                if parent not in rvs:
                    raise InvalidArgumentError(f"Node {name} has an unknown parent {parent}")
            factors.append(TabularCPDFactor(parents, name, rvs, node['cpt'], tol=tol))
        return cls(factors, tol=tol)

    def nodes(self):
        return list(self.dag.nodes)

    def parents(self, name: str):
        return list(self._cpd(name).parents)

    def children(self, name: str):
        return sorted(self.dag.children[self._check_node(name)])

    def states(self, name: str):
        return list(self.rvs[self._check_node(name)].states)

    def variable(self, name: str) -> RandomVariable:
        return self.rvs[self._check_node(name)]

    def has_node(self, name: str) -> bool:
        return name in self.cpds

    def _check_node(self, name):
        if name not in self.cpds:
            raise InvalidArgumentError(f"The network does not contain a node named {name}")
        return name

    def _cpd(self, name) -> TabularCPDFactor:
        return self.cpds[self._check_node(name)]

    def cpd(self, name: str) -> TabularCPDFactor:
        """The CPD factor of a node (a live view, do not modify it directly, use set_cpt)"""
        return self._cpd(name)

    def _check_parent_indices(self, cpd, parent_indices):
        parent_indices = tuple(int(i) for i in parent_indices)
        if len(parent_indices) != len(cpd.parents):
            raise InvalidArgumentError(
                f"Node {cpd.child} has {len(cpd.parents)} parents, got {len(parent_indices)} parent indices")
        for parent, idx in zip(cpd.parents, parent_indices):
            if not 0 <= idx < len(cpd.variables[parent]):
                raise InvalidArgumentError(f"State index {idx} is out of range for parent {parent}")
        return parent_indices

    def get_cpt(self, name: str, parent_indices=()):
        cpd = self._cpd(name)
        parent_indices = self._check_parent_indices(cpd, parent_indices)
        return cpd.row(parent_indices).copy()

    def set_cpt(self, name: str, probabilities, parent_indices=()):
        cpd = self._cpd(name)
        parent_indices = self._check_parent_indices(cpd, parent_indices)
        row = np.array(probabilities, dtype=float)
        if row.shape != (len(cpd.variables[name]),):
            raise InvalidArgumentError(
                f"Node {name} has {len(cpd.variables[name])} states, got a CPT row of shape {row.shape}")
        if np.any(row < 0):
            raise InvalidArgumentError(f"CPT rows cannot have negative entries, got {row} for {name}")
        if abs(row.sum() - 1.0) > self.tol:
            raise InvalidArgumentError(f"CPT rows must add up to 1.0, got {row.sum()} for {name}")
        cpd.values[parent_indices] = row
        self._joint = None

    def compile(self):
        """Multiply all CPD factors, the joint table has one axis per node in the order of nodes()"""
        # in topological order every factor only brings in the new child axis
        factors = [self.cpds[node] for node in self.dag.topo]
        product = functools.reduce(lambda a, b: a.product(b), factors)
        values = marginal_values(product.values, product.scope, self.dag.nodes)
        self._joint = TabularFactor(self.dag.nodes, self.rvs, values)
        logger.debug("compiled a network with %d nodes (%d joint entries)", len(self.dag.nodes), values.size)

    @property
    def is_compiled(self) -> bool:
        return self._joint is not None

    def _compiled_joint(self) -> TabularFactor:
        if self._joint is None:
            raise RuntimeError("Beliefs are stale after a CPT change, call compile() first")
        return self._joint

    def joint_beliefs(self, names, evidence=None) -> np.ndarray:
        """
        Marginal table of the nodes `names` (axes in the order given), read off the compiled joint,
         or the posterior given hard evidence (node name -> state label)
        """
        joint = self._compiled_joint()
        if evidence:
            return self.posterior_beliefs(names, evidence)
        names = list(names)
        for name in names:
            self._check_node(name)
        if len(names) != len(set(names)):
            raise InvalidArgumentError(f"No repetitions allowed in a belief query: {names}")
        return marginal_values(joint.values, joint.scope, names)

    def joint_belief(self, names, indices) -> float:
        names = list(names)
        indices = tuple(indices)
        if len(names) != len(indices):
            raise InvalidArgumentError("I need one state index per node")
        return float(self.joint_beliefs(names)[indices])

    def joint_distribution(self) -> JointDistribution:
        """The full joint over all nodes (in the order of nodes())"""
        return self._compiled_joint().to_joint()

    def copy(self) -> 'TabularBayesianNetwork':
        """An independent copy, CPT writes to either network do not affect the other"""
        return copy.deepcopy(self)

    def __str__(self):
        """Generate a view of the network (one CPT per node, in topological order) using tabulate"""
        blocks = [str(self.dag)]
        for node in self.dag.topo:
            blocks.append(self.cpds[node].display())
        return "\n\n".join(blocks)

    def __repr__(self):
        return f"TabularBayesianNetwork(nodes={list(self.dag.nodes)})"

    def display_beliefs(self, tablefmt="simple"):
        """Render the marginal beliefs of every node using tabulate"""
        rows = []
        for node in self.dag.topo:
            for state, p in zip(self.rvs[node], self.joint_beliefs([node])):
                rows.append([node, state, p])
        return tabulate(rows, headers=['node', 'state', 'belief'], tablefmt=tablefmt)
