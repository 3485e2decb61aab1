"""
Route finder: shortest paths over a small fixed road map.

Nodes are houses with canvas positions; edges are undirected weighted
roads. Dijkstra uses a sorted-insertion priority queue.
"""

import math
from collections import namedtuple

INF = math.inf

# canvas positions (x, y) used for drawing and car animation
NODES = {
    "A": (100, 100),
    "B": (300, 80),
    "C": (200, 250),
    "D": (450, 220),
    "E": (600, 350),
    "F": (400, 400),
}

# adjacency list: node -> {neighbour: weight}
GRAPH = {
    "A": {"B": 2, "C": 7},
    "B": {"A": 2, "C": 5, "D": 3},
    "C": {"A": 7, "B": 5, "D": 8, "F": 4},
    "D": {"B": 3, "C": 8, "E": 1},
    "E": {"D": 1, "F": 2},
    "F": {"C": 4, "E": 2},
}

CAR_SPEED = 120  # canvas units per second

Route = namedtuple("Route", "path distance")


class RouteError(ValueError):
    """A route request that cannot be answered."""


class SameNodeError(RouteError):
    pass


class NoRouteError(RouteError):
    pass


class PriorityQueue:
    """
    Priority queue kept sorted on insertion.

    `enqueue` is O(n); `dequeue` pops the lowest priority. Items with equal
    priority leave in insertion order.
    """

    def __init__(self):
        self.items = []

    def enqueue(self, element, priority):
        for i, (_, p) in enumerate(self.items):
            if priority < p:
                self.items.insert(i, (element, priority))
                return
        self.items.append((element, priority))

    def dequeue(self):
        """Remove and return the lowest-priority element, or None when empty."""
        if not self.items:
            return None
        return self.items.pop(0)[0]

    def is_empty(self):
        return not self.items

    def __len__(self):
        return len(self.items)


def dijkstra(graph, start, end):
    """
    Single-source shortest path from `start` to `end`.

    Args:
        graph (dict): node -> {neighbour: weight} with non-negative weights.
        start, end: Node names; both must be keys of `graph`.

    Returns:
        Route: (path, distance). An unreachable target gives an empty path
        and an infinite distance.

    Raises:
        KeyError: if either node is not in the graph.
    """
    for node in (start, end):
        if node not in graph:
            raise KeyError(node)

    dist = {n: INF for n in graph}
    prev = {n: None for n in graph}
    visited = set()
    dist[start] = 0

    queue = PriorityQueue()
    queue.enqueue(start, 0)
    while not queue.is_empty():
        curr = queue.dequeue()
        # stale entries stay in the queue after a shorter path is found
        if curr in visited:
            continue
        visited.add(curr)
        for neighbour, weight in graph[curr].items():
            if neighbour in visited:
                continue
            candidate = dist[curr] + weight
            if candidate < dist[neighbour]:
                dist[neighbour] = candidate
                prev[neighbour] = curr
                queue.enqueue(neighbour, candidate)

    if dist[end] == INF:
        return Route([], INF)

    path = []
    node = end
    while node is not None:
        path.append(node)
        node = prev[node]
    path.reverse()
    return Route(path, dist[end])


def find_route(start, end, graph=GRAPH):
    """
    Shortest route between two distinct nodes of the map.

    Raises:
        SameNodeError: when start and end are the same node.
        NoRouteError: when no road connects them.
    """
    if start == end:
        raise SameNodeError("Start and destination must differ")
    route = dijkstra(graph, start, end)
    if not route.path:
        raise NoRouteError("No route found between %s and %s" % (start, end))
    return route


def edge_key(a, b):
    """Undirected edge key with the endpoints in sorted order."""
    return (a, b) if a < b else (b, a)


def route_edges(path):
    """Return the set of undirected edge keys along `path`."""
    return {edge_key(a, b) for a, b in zip(path, path[1:])}


def road_edges(graph=GRAPH):
    """Return every undirected edge of `graph` once, sorted."""
    return sorted({edge_key(a, b) for a in graph for b in graph[a]})


def route_length(path, nodes=NODES):
    """Total canvas length of the polyline through `path`."""
    return sum(
        math.hypot(nodes[b][0] - nodes[a][0], nodes[b][1] - nodes[a][1])
        for a, b in zip(path, path[1:])
    )


def point_along(path, traveled, nodes=NODES):
    """
    Return the (x, y) canvas point `traveled` units along `path`.

    Values past the end clamp to the last node; an empty path gives None.
    """
    if not path:
        return None
    if traveled <= 0 or len(path) == 1:
        return nodes[path[0]]
    acc = 0.0
    for a, b in zip(path, path[1:]):
        ax, ay = nodes[a]
        bx, by = nodes[b]
        seg = math.hypot(bx - ax, by - ay)
        if acc + seg >= traveled:
            t = 0.0 if seg == 0 else (traveled - acc) / seg
            return (ax + (bx - ax) * t, ay + (by - ay) * t)
        acc += seg
    return nodes[path[-1]]
