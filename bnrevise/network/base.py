import itertools
import numpy as np
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist import RandomVariable


class BeliefNetwork:
    """
    The capability the revision algorithms need from a Bayesian network engine.

    Nodes are identified by name, states by their 0-based position in states(name),
     and the parents of a node are listed in the order that indexes its CPT rows.

    Concrete engines implement the abstract methods; the helpers at the bottom are
     derived from them and may be overridden with faster versions.
    """

    def nodes(self):
        """Return the names of all nodes"""
        raise NotImplementedError("To be implemented by a specific engine")

    def parents(self, name: str):
        """Return the ordered list of parent names of a node"""
        raise NotImplementedError("To be implemented by a specific engine")

    def states(self, name: str):
        """Return the ordered list of state labels of a node"""
        raise NotImplementedError("To be implemented by a specific engine")

    def joint_belief(self, names, indices) -> float:
        """Return the current joint probability of the nodes `names` taking the states `indices`"""
        raise NotImplementedError("To be implemented by a specific engine")

    def get_cpt(self, name: str, parent_indices=()):
        """Return the CPT row of a node for one assignment of its parents (a probability vector over its states)"""
        raise NotImplementedError("To be implemented by a specific engine")

    def set_cpt(self, name: str, probabilities, parent_indices=()):
        """
        Replace the CPT row of a node for one assignment of its parents.
        Parentless nodes use parent_indices=().
        Beliefs are stale until compile() is called.
        """
        raise NotImplementedError("To be implemented by a specific engine")

    def compile(self):
        """Recompute beliefs after CPT changes"""
        raise NotImplementedError("To be implemented by a specific engine")

    def has_node(self, name: str) -> bool:
        return name in set(self.nodes())

    def variable(self, name: str) -> RandomVariable:
        return RandomVariable(name, self.states(name))

    def variables(self, names) -> tuple:
        return tuple(self.variable(name) for name in names)

    def parent_assignments(self, name: str):
        """Enumerate the index tuples of all assignments of a node's parents (row-major order)"""
        return itertools.product(*(range(len(self.states(p))) for p in self.parents(name)))

    def evidence_indices(self, evidence: dict) -> dict:
        """Map hard evidence (node name -> observed state label) to state indices, checking both"""
        indices = {}
        for name, state in evidence.items():
            if not self.has_node(name):
                raise InvalidArgumentError(f"The network does not contain a node named {name}")
            states = list(self.states(name))
            if state not in states:
                raise InvalidArgumentError(f"{state} is not a state of {name}, expected one of {states}")
            indices[name] = states.index(state)
        return indices

    def posterior_beliefs(self, names, evidence: dict) -> np.ndarray:
        """
        Return Q(names | evidence) as a table with one axis per name (in the order given).
        The observed nodes cannot be queried, and the evidence must have positive probability.
        """
        names = list(names)
        indices = self.evidence_indices(evidence)
        for name in names:
            if name in indices:
                raise InvalidArgumentError(f"{name} is observed, it cannot be part of a belief query")
        table = self.joint_beliefs(names + list(indices))[(Ellipsis,) + tuple(indices.values())]
        Z = table.sum()
        if Z <= 0:
            raise InvalidArgumentError(f"The evidence {evidence} has probability 0")
        return table / Z

    def joint_beliefs(self, names, evidence=None) -> np.ndarray:
        """
        Return the current joint probability table of the nodes `names`
        (axes in the order given), one joint_belief query per assignment.
        With hard evidence (node name -> state label) the table is the posterior Q(names | evidence).
        """
        if evidence:
            return self.posterior_beliefs(names, evidence)
        names = list(names)
        shape = tuple(len(self.states(name)) for name in names)
        table = np.zeros(shape, dtype=float)
        for indices in itertools.product(*(range(d) for d in shape)):
            table[indices] = self.joint_belief(names, indices)
        return table

    def beliefs(self, name: str, evidence=None) -> np.ndarray:
        """The current marginal (or, given evidence, posterior) probability of each state of a node"""
        return self.joint_beliefs([name], evidence)
