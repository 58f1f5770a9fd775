"""
Probability constraints a revised distribution (or network) must satisfy.

A constraint is either a marginal R(Y), wrapping a JointDistribution, or a conditional R(A | B),
 wrapping a ConditionalDistribution; and it is either local (it only talks about one concept
 and some of its parents in a network) or nonlocal (arbitrary variables).

Constraints keep their own copy of the distribution, they are not affected by later changes
 to the object they were built from.
"""
from enum import Enum
import numpy as np
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist import JointDistribution, ConditionalDistribution
from bnrevise.ipfp.projection import project_marginal, project_conditional


class Scope(Enum):
    LOCAL = "local"
    NONLOCAL = "nonlocal"


class Constraint:
    """A target distribution and how to project a joint distribution onto it"""

    def __init__(self, distribution, scope: Scope):
        if not isinstance(scope, Scope):
            raise InvalidArgumentError(f"Expected a Scope, got {scope!r}")
        self._distribution = distribution.copy()
        self._scope = scope

    @property
    def distribution(self):
        """A copy of the target distribution"""
        return self._distribution.copy()

    @property
    def scope(self) -> Scope:
        return self._scope

    @property
    def is_local(self) -> bool:
        return self._scope is Scope.LOCAL

    @property
    def names(self) -> tuple:
        """Names of all variables the constraint mentions"""
        return self._distribution.names

    @property
    def variables(self) -> tuple:
        return self._distribution.variables

    @property
    def concept(self) -> str:
        """The target node of a local constraint"""
        raise NotImplementedError("To be implemented by a specific type of constraint")

    @property
    def context(self) -> tuple:
        """The variables of a local constraint other than its concept"""
        return tuple(name for name in self.names if name != self.concept)

    def project(self, q: JointDistribution) -> JointDistribution:
        """One IPFP step: return a new joint distribution that satisfies this constraint"""
        raise NotImplementedError("To be implemented by a specific type of constraint")

    def violation(self, q: JointDistribution) -> float:
        """The largest absolute deviation between the target and what `q` implies for the same variables"""
        raise NotImplementedError("To be implemented by a specific type of constraint")


class MarginalConstraint(Constraint):
    """
    R(Y): the marginal of the revised distribution over Y must equal the given table.

    A local marginal constraint is about a single concept C (by default the first variable of the table);
     the remaining variables must be network parents of C (checked against a network when it is used).
    """

    def __init__(self, distribution: JointDistribution, scope=Scope.NONLOCAL, concept=None):
        if not isinstance(distribution, JointDistribution):
            raise InvalidArgumentError(f"A marginal constraint needs a JointDistribution, got {distribution!r}")
        super().__init__(distribution, scope)
        if concept is not None and concept not in distribution:
            raise InvalidArgumentError(f"The concept {concept} is not one of the constrained variables")
        if concept is not None and not self.is_local:
            raise InvalidArgumentError("Only local constraints have a concept")
        self._concept = concept if concept is not None else distribution.names[0]

    @property
    def concept(self) -> str:
        if not self.is_local:
            raise InvalidArgumentError("A nonlocal constraint has no concept")
        return self._concept

    def project(self, q: JointDistribution) -> JointDistribution:
        return project_marginal(q, self._distribution)

    def violation(self, q: JointDistribution) -> float:
        implied = q.marginalize(self._distribution.names)
        return float(np.max(np.abs(self._distribution.values - implied.values)))

    def __repr__(self):
        return f"MarginalConstraint({list(self.names)}, scope={self._scope.value})"


class ConditionalConstraint(Constraint):
    """
    R(A | B): the conditional of the revised distribution must equal the given table.

    A local conditional constraint has a single prior C (the concept) and conditions that must be
     network parents of C (checked against a network when it is used).
    """

    def __init__(self, distribution: ConditionalDistribution, scope=Scope.NONLOCAL):
        if not isinstance(distribution, ConditionalDistribution):
            raise InvalidArgumentError(
                f"A conditional constraint needs a ConditionalDistribution, got {distribution!r}")
        super().__init__(distribution, scope)
        if self.is_local and len(distribution.priors) != 1:
            raise InvalidArgumentError(
                f"A local conditional constraint has a single prior, got {list(distribution.prior_names)}")

    @property
    def prior_names(self) -> tuple:
        return self._distribution.prior_names

    @property
    def cond_names(self) -> tuple:
        return self._distribution.cond_names

    @property
    def concept(self) -> str:
        if not self.is_local:
            raise InvalidArgumentError("A nonlocal constraint has no concept")
        return self._distribution.prior_names[0]

    def project(self, q: JointDistribution) -> JointDistribution:
        return project_conditional(q, self._distribution)

    def violation(self, q: JointDistribution) -> float:
        implied = q.conditional(self._distribution.priors, self._distribution.conds)
        # conditions with no mass under q say nothing about the constraint
        support = q.marginalize(self._distribution.conds).values > 0
        diff = np.abs(self._distribution.values - implied.values)[support]
        return float(np.max(diff)) if diff.size else 0.0

    def __repr__(self):
        return (f"ConditionalConstraint({list(self.prior_names)} | {list(self.cond_names)}, "
                f"scope={self._scope.value})")


def as_constraint(obj) -> Constraint:
    """
    Accept constraint objects as they are, and wrap bare distributions:
    a JointDistribution becomes a nonlocal MarginalConstraint,
    a ConditionalDistribution a nonlocal ConditionalConstraint.
    """
    if isinstance(obj, Constraint):
        return obj
    if isinstance(obj, JointDistribution):
        return MarginalConstraint(obj)
    if isinstance(obj, ConditionalDistribution):
        return ConditionalConstraint(obj)
    raise InvalidArgumentError(f"Expected a constraint or a distribution, got {obj!r}")


def as_constraints(objs) -> list:
    constraints = [as_constraint(obj) for obj in objs]
    if len(constraints) == 0:
        raise InvalidArgumentError("I need at least one constraint")
    return constraints
