from .base import BeliefNetwork
from .factor import TabularFactor, TabularCPDFactor
from .tabular import TabularBayesianNetwork
from .convert import network_to_joint, joint_to_network, write_conditional
from .compare import network_total_variation, belief_difference

__all__ = [
    "BeliefNetwork",
    "TabularFactor",
    "TabularCPDFactor",
    "TabularBayesianNetwork",
    "network_to_joint",
    "joint_to_network",
    "write_conditional",
    "network_total_variation",
    "belief_difference",
]
