from .tensor import Tensor
from .variable import RandomVariable
from .conditional import ConditionalDistribution
from .joint import JointDistribution
from .divergence import total_variation, cross_entropy, is_undefined, UNDEFINED_DIVERGENCE

__all__ = [
    "Tensor",
    "RandomVariable",
    "ConditionalDistribution",
    "JointDistribution",
    "total_variation",
    "cross_entropy",
    "is_undefined",
    "UNDEFINED_DIVERGENCE",
]
