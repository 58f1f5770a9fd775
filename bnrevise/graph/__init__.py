from .dag import DAG, edge_maps, topological_order, transitive_sets
from .closure import is_descendant, loose_closure, strict_closure

__all__ = [
    "DAG",
    "edge_maps",
    "topological_order",
    "transitive_sets",
    "is_descendant",
    "loose_closure",
    "strict_closure",
]
