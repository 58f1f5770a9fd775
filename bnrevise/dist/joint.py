import numpy as np
from tabulate import tabulate
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist.tensor import Tensor, marginal_values
from bnrevise.dist.variable import RandomVariable
from bnrevise.dist.conditional import ConditionalDistribution, check_variables


class JointDistribution:
    """
    A joint probability distribution over an ordered list of random variables,
    stored as a dense table (a Tensor) whose axes follow the order of the variables.

    Validity (entries in [0, 1] adding up to 1) can be checked with is_valid,
     but it is not enforced: the IPFP procedures go through unnormalised tables on purpose.
    """

    def __init__(self, variables, values=None):
        """
        variables: a non-empty sequence of RandomVariable objects, no repeated names
        values: optional table (flat row-major, or shaped as the variables' state counts),
            zeros if omitted
        """
        variables = check_variables(variables)
        if len(variables) == 0:
            raise InvalidArgumentError("No random variables specified")
        self.variables = variables
        self.names = tuple(rv.name for rv in variables)
        self._name2dim = {name: dim for dim, name in enumerate(self.names)}
        self.tensor = Tensor([len(rv) for rv in variables], values)

    @classmethod
    def uniform(cls, variables) -> 'JointDistribution':
        variables = tuple(variables)
        shape = tuple(len(rv) for rv in variables)
        return cls(variables, np.full(shape, 1.0 / np.prod(shape)))

    @property
    def values(self):
        return self.tensor.values

    def dimension(self, name: str) -> int:
        """Return the axis (position) of a variable given its name"""
        try:
            return self._name2dim[name]
        except KeyError:
            raise InvalidArgumentError(f"Variable {name} is not in this distribution") from None

    def variable(self, name: str) -> RandomVariable:
        return self.variables[self.dimension(name)]

    def __contains__(self, name: str):
        return name in self._name2dim

    @property
    def num_variables(self):
        return len(self.variables)

    @property
    def num_entries(self):
        return self.tensor.size

    def entry(self, indices) -> float:
        return self.tensor.get(indices)

    def set_entry(self, indices, value: float):
        self.tensor.set(indices, value)

    def prob(self, assignment: dict) -> float:
        """
        Return the entry of an assignment, a dict mapping each variable's name to one of its states.
        Irrelevant names in the dict are ignored.
        """
        return self.entry(tuple(rv.index(assignment[rv.name]) for rv in self.variables))

    def iter_indices(self):
        return self.tensor.iter_indices()

    def sum(self) -> float:
        return self.tensor.sum()

    def is_valid(self, tol=0.01) -> bool:
        """True if every entry is in [0, 1] and the entries add up to 1 (within tol)"""
        if np.any(self.values < 0.0) or np.any(self.values > 1.0):
            return False
        return abs(self.sum() - 1.0) <= tol

    def copy(self) -> 'JointDistribution':
        return JointDistribution(self.variables, self.values.copy())

    def normalized(self) -> 'JointDistribution':
        Z = self.sum()
        if Z > 0:
            return JointDistribution(self.variables, self.values / Z)
        else:
            raise InvalidArgumentError(f"I need Z > 0, got Z={Z}")

    def resolve(self, variables, what="variables") -> tuple:
        """
        Map a sequence of names or RandomVariable objects to this distribution's own variables,
        checking that each is present (with the same states) and none is repeated.
        """
        resolved = []
        for v in variables:
            name = v.name if isinstance(v, RandomVariable) else v
            if name not in self._name2dim:
                raise InvalidArgumentError(f"Variable {name} is not in this distribution")
            own = self.variables[self._name2dim[name]]
            if isinstance(v, RandomVariable) and v != own:
                raise InvalidArgumentError(f"Variable {name} has states {list(v.states)}, expected {list(own.states)}")
            resolved.append(own)
        return check_variables(resolved, what)

    def marginalize(self, variables) -> 'JointDistribution':
        """
        Return the marginal distribution over the given variables (in the order given),
        summing out every other variable.

        variables: a non-empty sequence of names or RandomVariable objects in this distribution
        """
        keep = self.resolve(variables)
        if len(keep) == 0:
            raise InvalidArgumentError("No random variables to marginalize onto")
        new_values = marginal_values(self.values, self.names, [rv.name for rv in keep])
        return JointDistribution(keep, new_values)

    def conditional(self, priors, conds) -> ConditionalDistribution:
        """
        Return P(priors | conds) = P(priors, conds) / P(conds).
        Where P(conds) is 0 the ratio is undefined and the entry is left at 0.

        priors, conds: disjoint, non-empty sequences of names or RandomVariable objects in this distribution
        """
        priors = self.resolve(priors, "priors")
        conds = self.resolve(conds, "conditions")
        if len(priors) == 0:
            raise InvalidArgumentError("No prior random variables specified")
        if len(conds) == 0:
            raise InvalidArgumentError("No condition random variables specified")
        cond_names = [rv.name for rv in conds]
        both_names = cond_names + [rv.name for rv in priors]
        if len(set(both_names)) != len(both_names):
            raise InvalidArgumentError("Priors and conditions must be disjoint")
        marginal1 = marginal_values(self.values, self.names, both_names)
        marginal2 = marginal_values(self.values, self.names, cond_names)
        # one trailing singleton axis per prior, so the division broadcasts over the priors
        denominator = marginal2.reshape(marginal2.shape + (1,) * len(priors))
        new_values = np.divide(marginal1, denominator, out=np.zeros_like(marginal1), where=denominator > 0)
        return ConditionalDistribution(priors, conds, new_values)

    def aligned_values(self, other: 'JointDistribution') -> np.ndarray:
        """
        Return the table of `other` with its axes permuted into this distribution's variable order.
        Both distributions must be over the same variables (with the same states).
        """
        if set(self.names) != set(other.names):
            raise InvalidArgumentError(f"Distributions over different variables: {self.names} vs {other.names}")
        other.resolve(self.variables)
        perm = [other.dimension(name) for name in self.names]
        return np.transpose(other.values, perm)

    def display(self, tablefmt="simple", value_name="P"):
        """Render the distribution as a string for visualisation using tabulate"""
        data = []
        joint_states = RandomVariable.enumerate_joint_states(*self.variables)
        for states, value in zip(joint_states, self.values.flatten()):
            data.append(list(states) + [value])
        return tabulate(data, headers=list(self.names) + [value_name], tablefmt=tablefmt)

    def __str__(self):
        return self.display()

    def __repr__(self):
        return f"JointDistribution({list(self.names)})"
