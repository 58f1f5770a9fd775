from collections import deque
from tabulate import tabulate
from bnrevise.errors import InvalidArgumentError


def edge_maps(nodes, edges):
    """Return (children, parents), two dicts mapping each node to a set of neighbours"""
    children = {node: set() for node in nodes}
    parents = {node: set() for node in nodes}
    for parent, child in edges:
        for end in (parent, child):
            if end not in children:
                raise InvalidArgumentError(f"The edge {parent} -> {child} mentions {end}, which is not a node")
        children[parent].add(child)
        parents[child].add(parent)
    return children, parents


def topological_order(nodes, children: dict, parents: dict) -> tuple:
    """
    Kahn's algorithm. Among the nodes that are ready at the same time, the one declared first goes first,
     so a graph whose nodes are already listed parents-first keeps its order.
    """
    position = {node: i for i, node in enumerate(nodes)}
    waiting = {node: len(parents[node]) for node in nodes}
    ready = deque(node for node in nodes if waiting[node] == 0)
    order = []
    while ready:
        node = ready.popleft()
        order.append(node)
        for child in sorted(children[node], key=position.get):
            waiting[child] -= 1
            if waiting[child] == 0:
                ready.append(child)
    if len(order) != len(nodes):
        cyclic = sorted(node for node in nodes if waiting[node] > 0)
        raise InvalidArgumentError(f"The graph has a cycle through (some of) {cyclic}")
    return tuple(order)


def transitive_sets(order, neighbours: dict) -> dict:
    """
    For each node, every node reachable by following `neighbours` repeatedly.
    `order` must list a node after all of its neighbours (topological order for parents,
     reversed topological order for children).
    """
    reach = {}
    for node in order:
        found = set()
        for other in neighbours[node]:
            found.add(other)
            found |= reach[other]
        reach[node] = found
    return reach


class DAG:
    """
    The structure of a Bayesian network: named nodes and directed (parent, child) edges.

    Besides the nodes and edges we keep the parent and child maps, a topological order
     (topo) and, for every node, its sets of ancestors and descendants.
    """

    def __init__(self, nodes: list, edges: list):
        """
        nodes: node names (converted with str)
        edges: (parent, child) pairs of node names
        """
        self.nodes = tuple(str(node) for node in nodes)
        if len(set(self.nodes)) < len(self.nodes):
            raise InvalidArgumentError(f"A node is listed more than once: {list(self.nodes)}")
        self.edges = tuple((str(u), str(v)) for u, v in edges)
        self.children, self.parents = edge_maps(self.nodes, self.edges)
        self.topo = topological_order(self.nodes, self.children, self.parents)
        self.ancestors = transitive_sets(self.topo, self.parents)
        self.descendants = transitive_sets(reversed(self.topo), self.children)

    def roots(self) -> list:
        """Nodes without parents, in topological order"""
        return [node for node in self.topo if not self.parents[node]]

    def is_descendant(self, node, ancestor) -> bool:
        return node in self.descendants[ancestor]

    def __str__(self):
        """One row per node (in topological order) with its parents, rendered with tabulate"""
        rows = [[", ".join(sorted(self.parents[node])), node] for node in self.topo]
        return tabulate(rows, headers=['parents', 'child'], tablefmt='grid')

    def __repr__(self):
        return f"DAG(nodes={list(self.nodes)}, edges={list(self.edges)})"
