import itertools
import numpy as np
from tabulate import tabulate
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist import RandomVariable, JointDistribution
from bnrevise.dist.tensor import marginal_values, broadcast_values


class TabularFactor:
    """
    A non-negative table over a list of named random variables (the scope).

    values has one axis per name in the scope, in the same order, and axis i has
     as many entries as the variable scope[i] has states.
    """

    def __init__(self, scope: list, variables: dict, values):
        """
        scope: list of rv names, one per axis of values
        variables: dict mapping rv names to RandomVariable objects
            (it may hold more variables than the scope, the others are ignored)
        values: array-like with shape [number of states of each rv in the scope]
        """
        if len(scope) != len(set(scope)):
            raise InvalidArgumentError(f"No repetitions allowed in a factor's scope: {list(scope)}")
        self.scope = tuple(scope)
        self.variables = {name: variables[name] for name in self.scope}
        self.values = np.array(values, dtype=float)
        shape = tuple(len(self.variables[name]) for name in self.scope)
        if self.values.shape != shape:
            raise InvalidArgumentError(f"I need a table of shape {shape} but got {self.values.shape}")

    def __contains__(self, name: str):
        return name in self.variables

    def __iter__(self):
        return iter(self.scope)

    def evaluate(self, assignment: dict) -> float:
        """The entry of an assignment (rv name -> state label) to every rv in the scope"""
        return self.values[tuple(self.variables[name].index(assignment[name]) for name in self.scope)]

    def marginalize(self, vars_to_sum_out: set) -> 'TabularFactor':
        """A new factor over the scope minus `vars_to_sum_out`, with those rvs summed out"""
        keep = [name for name in self.scope if name not in vars_to_sum_out]
        return TabularFactor(keep, self.variables, marginal_values(self.values, self.scope, keep))

    def _product_scope(self, other) -> tuple:
        return self.scope + tuple(name for name in other.scope if name not in self.variables)

    def didactic_product(self, other) -> 'TabularFactor':
        """
        The product of two factors computed one entry at a time.
        This visits every joint assignment of the combined scope, so it only suits small factors.
        """
        scope = self._product_scope(other)
        variables = {**other.variables, **self.variables}
        values = np.zeros([len(variables[name]) for name in scope])
        for indices in itertools.product(*(range(len(variables[name])) for name in scope)):
            at = dict(zip(scope, indices))
            values[indices] = (self.values[tuple(at[name] for name in self.scope)]
                               * other.values[tuple(at[name] for name in other.scope)])
        return TabularFactor(scope, variables, values)

    def product(self, other) -> 'TabularFactor':
        """
        The product of two factors, over this factor's scope followed by the rvs only `other` has,
         e.g. phi1(A, B) x phi2(B, C) = phi3(A, B, C).
        Shared rvs must have the same states in both factors.
        """
        for name in other.scope:
            if name in self.variables and self.variables[name] != other.variables[name]:
                raise InvalidArgumentError(f"The two factors disagree on the states of {name}")
        scope = self._product_scope(other)
        # our own axes come first, the new ones are appended as singletons
        mine = self.values.reshape(self.values.shape + (1,) * (len(scope) - len(self.scope)))
        values = mine * broadcast_values(other.values, list(other.scope), list(scope))
        return TabularFactor(scope, {**other.variables, **self.variables}, values)

    def normalize(self) -> 'TabularFactor':
        """A copy whose entries add up to 1"""
        Z = self.values.sum()
        if Z > 0:
            return TabularFactor(self.scope, self.variables, self.values / Z)
        raise InvalidArgumentError(f"I need Z > 0, got Z={Z}")

    def to_joint(self) -> JointDistribution:
        """The factor as a JointDistribution over its scope (not normalized)"""
        return JointDistribution([self.variables[name] for name in self.scope], self.values.copy())

    def display(self, tablefmt="simple", factor_name="Value"):
        """One row per joint assignment of the scope, rendered with tabulate"""
        rvs = [self.variables[name] for name in self.scope]
        rows = [list(states) + [value]
                for states, value in zip(RandomVariable.enumerate_joint_states(*rvs), self.values.flatten())]
        return tabulate(rows, headers=list(self.scope) + [factor_name], tablefmt=tablefmt)

    def __str__(self):
        return self.display()

    def __repr__(self):
        return f"TabularFactor({list(self.scope)})"


class TabularCPDFactor(TabularFactor):
    """
    The CPT of a child rv, as a factor over (parents..., child).

    Axis i < len(parents) is parents[i] and the last axis is the child, so fixing
     one state per parent leaves a distribution over the child's states.
    """

    def __init__(self, parents, child: str, variables: dict, values, tol=1e-6):
        """
        parents: ordered names of the parent rvs
        child: name of the child rv
        variables: dict mapping rv names to RandomVariable objects (parents and child at least)
        values: array-like of shape [number of states of each parent] + [number of states of the child],
            non-negative, each row adding up to 1.0 within tol
        """
        super().__init__(tuple(parents) + (child,), variables, values)
        self.child = child
        self.parents = tuple(parents)
        if np.any(self.values < 0):
            raise InvalidArgumentError(f"The CPT of {child} has negative entries")
        if not np.allclose(self.values.sum(axis=-1), 1.0, atol=tol):
            raise InvalidArgumentError(f"Some rows of the CPT of {child} do not add up to 1.0")

    def row(self, parent_indices) -> np.ndarray:
        return self.values[tuple(parent_indices)]

    def display(self, tablefmt="simple", factor_name="Value"):
        """One row per parent assignment, one column per state of the child"""
        child_rv = self.variables[self.child]
        parent_rvs = [self.variables[name] for name in self.parents]
        rows = [list(parent_states) + probs.tolist()
                for parent_states, probs in zip(RandomVariable.enumerate_joint_states(*parent_rvs),
                                                self.values.reshape(-1, len(child_rv)))]
        headers = list(self.parents) + [f"{self.child}={state}" for state in child_rv]
        return tabulate(rows, headers=headers, tablefmt=tablefmt)
