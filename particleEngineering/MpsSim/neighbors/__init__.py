# -- Neighbor Search Package -- #

'''
Uniform-grid neighbor search: cell arithmetic, the grid itself,
consumer-side loops, and reference searches for validation.

Sean Bowman [02/12/2026]
'''

from particleEngineering.MpsSim.neighbors.protocols import (
    CoordinateProvider,
    GridConfig,
    GridConstructionError,
    GridIndexError,
    NeighborSearch,
)
from particleEngineering.MpsSim.neighbors.cellIndexer import CellIndexer
from particleEngineering.MpsSim.neighbors.grid import Grid
from particleEngineering.MpsSim.neighbors.neighborLists import (
    buildNeighborLists,
    findPairs,
    iterNeighbors,
    neighborCounts,
)
