"""Procedural dungeon generation core.

The package builds traversable tile levels (see :mod:`delve.world.procgen`)
and provides the spatial queries that run over them: reachability analysis,
A* pathfinding and field of view.
"""

__version__ = "0.3.0"
