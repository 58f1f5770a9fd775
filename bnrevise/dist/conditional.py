import numpy as np
from tabulate import tabulate
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist.tensor import Tensor
from bnrevise.dist.variable import RandomVariable


def check_variables(variables, what="variables"):
    """
    Return the variables as a tuple, checking that each one is a RandomVariable
    and that no name is listed twice.
    """
    variables = tuple(variables)
    for rv in variables:
        if not isinstance(rv, RandomVariable):
            raise InvalidArgumentError(f"Expected RandomVariable objects as {what}, got {rv!r}")
    names = [rv.name for rv in variables]
    if len(names) != len(set(names)):
        raise InvalidArgumentError(f"No repetitions allowed in {what}: {names}")
    return variables


class ConditionalDistribution:
    """
    A conditional probability distribution P(priors | conds) stored as a dense table.

    priors and conds are two disjoint, non-empty, ordered lists of random variables.
    The axes of the table are the conds (in order) followed by the priors (in order),
     so for a fixed assignment of the conds, values[cond_indices] is a table over the priors
     which should add up to 1.0.
    """

    def __init__(self, priors, conds, values=None):
        """
        priors: RandomVariable objects for the variables on the left of the bar
        conds: RandomVariable objects for the variables on the right of the bar
        values: optional table (flat row-major, or shaped conds + priors), zeros if omitted
        """
        priors = check_variables(priors, "priors")
        conds = check_variables(conds, "conditions")
        if len(priors) == 0:
            raise InvalidArgumentError("No prior random variables specified")
        if len(conds) == 0:
            raise InvalidArgumentError("No condition random variables specified")
        overlap = {rv.name for rv in priors} & {rv.name for rv in conds}
        if overlap:
            raise InvalidArgumentError(f"Priors and conditions must be disjoint, both contain {sorted(overlap)}")
        self.priors = priors
        self.conds = conds
        self.variables = conds + priors
        self.names = tuple(rv.name for rv in self.variables)
        self._name2dim = {name: dim for dim, name in enumerate(self.names)}
        self.tensor = Tensor([len(rv) for rv in self.variables], values)

    @property
    def values(self):
        return self.tensor.values

    @property
    def prior_names(self):
        return tuple(rv.name for rv in self.priors)

    @property
    def cond_names(self):
        return tuple(rv.name for rv in self.conds)

    def dimension(self, name: str) -> int:
        """The axis of a variable (conds first, then priors)"""
        try:
            return self._name2dim[name]
        except KeyError:
            raise InvalidArgumentError(f"Variable {name} is not in this distribution") from None

    def __contains__(self, name: str):
        return name in self._name2dim

    @property
    def num_entries(self):
        return self.tensor.size

    def entry(self, indices) -> float:
        """indices: one state index per variable, conds first, then priors"""
        return self.tensor.get(indices)

    def set_entry(self, indices, value: float):
        self.tensor.set(indices, value)

    def iter_indices(self):
        return self.tensor.iter_indices()

    def iter_conditions(self):
        """Enumerate the index tuples of all joint assignments of the conds, in row-major order"""
        return Tensor([len(rv) for rv in self.conds]).iter_indices()

    def row(self, cond_indices) -> np.ndarray:
        """The table over the priors for one assignment of the conds"""
        return self.values[tuple(cond_indices)]

    def is_valid(self, tol=0.01) -> bool:
        """
        True if every entry is in [0, 1] and, for every assignment of the conds,
        the entries over the priors add up to 1 (within tol).
        """
        if np.any(self.values < 0.0) or np.any(self.values > 1.0):
            return False
        axes = tuple(range(len(self.conds), len(self.variables)))
        sums = np.sum(self.values, axis=axes)
        return bool(np.all(np.abs(sums - 1.0) <= tol))

    def normalized(self) -> 'ConditionalDistribution':
        """
        Return a copy whose rows (tables over the priors) add up to 1.
        Rows with no mass are left at zero.
        """
        axes = tuple(range(len(self.conds), len(self.variables)))
        sums = np.sum(self.values, axis=axes, keepdims=True)
        new_values = np.divide(self.values, sums, out=np.zeros_like(self.values), where=sums > 0)
        return ConditionalDistribution(self.priors, self.conds, new_values)

    def copy(self) -> 'ConditionalDistribution':
        return ConditionalDistribution(self.priors, self.conds, self.values.copy())

    def display(self, tablefmt="simple"):
        """Render the distribution as a string for visualisation using tabulate"""
        headers = [rv.name for rv in self.conds]
        prior_outcomes = list(RandomVariable.enumerate_joint_states(*self.priors))
        for outcome in prior_outcomes:
            headers.append(','.join(f"{rv.name}={s}" for rv, s in zip(self.priors, outcome)))
        data = []
        rows = self.values.reshape(-1, len(prior_outcomes))
        for ctxt, row in zip(RandomVariable.enumerate_joint_states(*self.conds), rows):
            data.append(list(ctxt) + row.tolist())
        return tabulate(data, headers=headers, tablefmt=tablefmt)

    def __str__(self):
        return self.display()

    def __repr__(self):
        return f"ConditionalDistribution(priors={list(self.prior_names)}, conds={list(self.cond_names)})"
