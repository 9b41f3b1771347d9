# -- Uniform Grid for Fixed-Radius Neighbor Search -- #

'''
Bucket-sorted uniform grid for MPS/SPH neighbor search.

The grid is built once per step from a snapshot of the particle
coordinates and a validity mask. Valid particles are hashed into cubic
(3D) or square (2D) cells whose edge equals the influence radius, the
(hash, index) pairs are stably sorted by hash, and a table maps every
occupied hash to its contiguous range in the sorted list. A query then
only scans the particle's own cell and its 8 (2D) or 26 (3D) adjacent
cells before applying the exact distance test. Where floating-point
rounding of the cell index could put a particle closer than the radius
one cell further out, the block is widened on that axis.

Usage:
    grid = Grid(influenceRadius, positions, particleTypes != ParticleType.GHOST, 2)
    for i in range(grid.size):
        if not valid[i]:
            continue
        for j in grid.getNeighbors(i):
            interaction(i, j)

Invalid (ghost) particles are never placed in a cell and never returned
as neighbors. Asking for the neighbors OF an invalid particle is not
rejected; callers are expected to skip those indices.

References:
-----------
Green (2010) -- Particle Simulation using CUDA
Ihmsen et al. (2011) -- Parallel Neighbor-Search for SPH

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import operator

import numpy as np

from particleEngineering.MpsSim.neighbors.cellIndexer import CellIndexer
from particleEngineering.MpsSim.neighbors.protocols import (
    CoordinateProvider,
    GridConstructionError,
    GridIndexError,
)


_EMPTY = np.empty(0, dtype=np.int64)
_EMPTY.setflags(write=False)


def pairDistances(points: np.ndarray, origin: np.ndarray, dimension: int) -> np.ndarray:
    '''
    Euclidean distances from one point to many over the active axes.

    Parameters:
    -----------
    points : np.ndarray
        Positions, shape (N, >=dimension)
    origin : np.ndarray
        Reference position, shape (>=dimension,)
    dimension : int
        Number of axes taking part in the distance (2 or 3)

    Returns:
    --------
    np.ndarray : Distances, shape (N,)
    '''
    diff = points[:, :dimension] - origin[:dimension]
    return np.sqrt(np.sum(diff * diff, axis=1))


class Grid:
    '''
    Immutable uniform grid over one coordinate snapshot.

    Parameters:
    -----------
    gridWidth : float
        Cell edge length and neighbor radius [m], must be > 0
    coordinates : np.ndarray
        Particle positions, shape (N, 3). Shape (N, 2) is accepted
        for 2D and embedded with a zero third column.
    validCoordinates : np.ndarray
        Boolean mask, shape (N,). False rows are ignored and may hold
        garbage, including NaN.
    dimension : int
        Number of spatial dimensions (2 or 3)

    Raises:
    -------
    GridConstructionError : On a non-positive width, unknown dimension,
        mismatched shapes, or non-finite valid coordinates
    '''

    def __init__(
        self,
        gridWidth: float,
        coordinates: np.ndarray,
        validCoordinates: np.ndarray,
        dimension: int,
    ) -> None:
        self._dimension = self._checkDimension(dimension)
        self._gridWidth = self._checkGridWidth(gridWidth)
        self._coordinates = self._copyCoordinates(coordinates, self._dimension)
        self._validCoordinates = self._copyMask(validCoordinates, self._coordinates.shape[0])
        self._size = self._coordinates.shape[0]

        validRows = self._coordinates[self._validCoordinates, :self._dimension]
        if not np.all(np.isfinite(validRows)):
            raise GridConstructionError('Valid coordinates must be finite')

        self._lowerBounds, self._higherBounds = self._computeBounds(validRows)
        self._indexer = CellIndexer.fromBounds(
            self._dimension, self._lowerBounds, self._higherBounds, self._gridWidth,
        )

        self._sortedHashes: np.ndarray = _EMPTY
        self._sortedIndices: np.ndarray = _EMPTY
        self._beginHash: dict[int, tuple[int, int]] = {}
        self._setHash()

    @classmethod
    def fromProvider(
        cls,
        gridWidth: float,
        provider: CoordinateProvider,
        dimension: int,
    ) -> Grid:
        '''
        Build a grid from a particle container's current snapshot.

        Parameters:
        -----------
        gridWidth : float
            Cell edge length and neighbor radius [m]
        provider : CoordinateProvider
            Object exposing coordinates (N, 3) and validMask (N,)
        dimension : int
            Number of spatial dimensions (2 or 3)

        Returns:
        --------
        Grid : Grid over the provider's valid particles
        '''
        return cls(gridWidth, provider.coordinates, provider.validMask, dimension)

    #--------------------------------------------------------------------#
    # -- Ownership -- #
    #--------------------------------------------------------------------#

    def __copy__(self) -> Grid:
        raise TypeError('Grid is bound to one coordinate snapshot; build a new Grid instead')

    def __deepcopy__(self, memo: dict) -> Grid:
        raise TypeError('Grid is bound to one coordinate snapshot; build a new Grid instead')

    def __repr__(self) -> str:
        return (
            f'Grid(dimension={self._dimension}, size={self._size}, '
            f'gridWidth={self._gridWidth}, occupiedCells={self.nOccupiedCells})'
        )

    #--------------------------------------------------------------------#
    # -- Introspection -- #
    #--------------------------------------------------------------------#

    @property
    def size(self) -> int:
        '''Total number of particles, valid or not.'''
        return self._size

    @property
    def dimension(self) -> int:
        '''Number of spatial dimensions (2 or 3).'''
        return self._dimension

    @property
    def gridWidth(self) -> float:
        '''Cell edge length and neighbor radius [m].'''
        return self._gridWidth

    @property
    def nValid(self) -> int:
        '''Number of particles placed in the grid.'''
        return int(self._sortedIndices.shape[0])

    @property
    def nOccupiedCells(self) -> int:
        return len(self._beginHash)

    @property
    def lowerBounds(self) -> np.ndarray:
        '''Per-axis minimum over valid coordinates, shape (3,) [m].'''
        return self._lowerBounds.copy()

    @property
    def higherBounds(self) -> np.ndarray:
        '''Per-axis maximum over valid coordinates, shape (3,) [m].'''
        return self._higherBounds.copy()

    @property
    def gridNumber(self) -> tuple[int, int, int]:
        '''Cells along x, y, z. The z count is 0 for a 2D grid.'''
        counts = [int(n) for n in self._indexer.gridNumber]
        if self._dimension == 2:
            counts.append(0)
        return tuple(counts)

    @property
    def gridHash(self) -> np.ndarray:
        '''(cellHash, particleIndex) rows sorted by hash, shape (nValid, 2).'''
        return np.column_stack((self._sortedHashes, self._sortedIndices))

    @property
    def beginHash(self) -> dict[int, tuple[int, int]]:
        '''Occupied cell hash -> half-open (begin, end) range into gridHash.'''
        return dict(self._beginHash)

    def cellOf(self, index: int) -> tuple[int, ...]:
        '''Integer cell indices (dx, dy, dz) of a particle; dz is 0 in 2D.'''
        index = self._checkIndex(index)
        cell = [int(d) for d in self._indexer.toIndex(self._coordinates[index])]
        if self._dimension == 2:
            cell.append(0)
        return tuple(cell)

    #--------------------------------------------------------------------#
    # -- Queries -- #
    #--------------------------------------------------------------------#

    def getNeighbors(self, index: int) -> np.ndarray:
        '''
        Valid particles strictly closer than gridWidth to a particle.

        Candidates come from the particle's cell and its adjacent cells,
        in ascending cell-hash order and sorted-bucket order within a
        cell. The exact Euclidean distance over the active axes is then
        tested against gridWidth.

        Parameters:
        -----------
        index : int
            Source particle index in [0, size)

        Returns:
        --------
        np.ndarray : Neighbor indices (int64), never containing index

        Raises:
        -------
        GridIndexError : If index is outside [0, size)
        '''
        index = self._checkIndex(index)
        candidates = self._candidates(index)
        if candidates.shape[0] == 0:
            return candidates

        distances = pairDistances(
            self._coordinates[candidates], self._coordinates[index], self._dimension,
        )
        return candidates[distances < self._gridWidth]

    def getNeighborsInBox(self, index: int) -> np.ndarray:
        '''
        Valid particles in the cell block around a particle.

        Same candidate set and order as getNeighbors, without the
        distance filter. Always a superset of getNeighbors(index).

        Parameters:
        -----------
        index : int
            Source particle index in [0, size)

        Returns:
        --------
        np.ndarray : Candidate indices (int64), never containing index

        Raises:
        -------
        GridIndexError : If index is outside [0, size)
        '''
        index = self._checkIndex(index)
        return self._candidates(index)

    #--------------------------------------------------------------------#
    # -- Construction Helpers -- #
    #--------------------------------------------------------------------#

    def _setHash(self) -> None:
        '''
        Hash valid particles, sort by hash, and record bucket ranges.

        The sort is stable, so particles sharing a cell keep ascending
        index order.
        '''
        validIndices = np.flatnonzero(self._validCoordinates).astype(np.int64)
        if validIndices.shape[0] == 0:
            return

        cells = self._indexer.toIndex(self._coordinates[validIndices])
        hashes = self._indexer.toHash(cells)

        order = np.argsort(hashes, kind='stable')
        self._sortedHashes = hashes[order]
        self._sortedIndices = validIndices[order]
        self._sortedHashes.setflags(write=False)
        self._sortedIndices.setflags(write=False)

        # One pass over the sorted hashes: each run of equal values is a bucket
        uniqueHashes, begins, counts = np.unique(
            self._sortedHashes, return_index=True, return_counts=True,
        )
        ends = begins + counts
        self._beginHash = {
            int(h): (int(b), int(e)) for h, b, e in zip(uniqueHashes, begins, ends)
        }

    def _getGridHashBegin(self, cellHash: int) -> tuple[int, int]:
        '''Bucket range of a cell, or (-1, -1) when the cell is empty.'''
        return self._beginHash.get(cellHash, (-1, -1))

    def _candidates(self, index: int) -> np.ndarray:
        '''Valid particles in the block around index, excluding index.'''
        if not self._beginHash:
            return _EMPTY

        point = self._coordinates[index]
        if not np.all(np.isfinite(point[:self._dimension])):
            return _EMPTY

        chunks = []
        for cellHash in self._indexer.blockHashes(point, self._gridWidth):
            begin, end = self._getGridHashBegin(cellHash)
            if begin < 0:
                continue
            chunks.append(self._sortedIndices[begin:end])

        if not chunks:
            return _EMPTY

        candidates = np.concatenate(chunks)
        return candidates[candidates != index]

    def _computeBounds(self, validRows: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        '''Per-axis min/max over valid rows only; zeros when none are valid.'''
        lower = np.zeros(3)
        higher = np.zeros(3)
        if validRows.shape[0] > 0:
            lower[:self._dimension] = validRows.min(axis=0)
            higher[:self._dimension] = validRows.max(axis=0)
        lower.setflags(write=False)
        higher.setflags(write=False)
        return lower, higher

    def _checkIndex(self, index: int) -> int:
        try:
            index = operator.index(index)
        except TypeError:
            raise GridIndexError(f'Particle index must be an integer, got {index!r}') from None
        if not 0 <= index < self._size:
            raise GridIndexError(f'Particle index {index} out of range [0, {self._size})')
        return index

    @staticmethod
    def _checkDimension(dimension: int) -> int:
        if dimension not in (2, 3):
            raise GridConstructionError(f'Dimension must be 2 or 3, got {dimension}')
        return int(dimension)

    @staticmethod
    def _checkGridWidth(gridWidth: float) -> float:
        try:
            gridWidth = float(gridWidth)
        except (TypeError, ValueError):
            raise GridConstructionError(f'Grid width must be a number, got {gridWidth!r}') from None
        if not np.isfinite(gridWidth) or gridWidth <= 0.0:
            raise GridConstructionError(f'Grid width must be positive, got {gridWidth}')
        return gridWidth

    @staticmethod
    def _copyCoordinates(coordinates: np.ndarray, dimension: int) -> np.ndarray:
        '''Private (N, 3) float64 copy of the coordinate matrix.'''
        coords = np.array(coordinates, dtype=np.float64, copy=True)
        if coords.ndim == 1 and coords.shape[0] == 0:
            coords = coords.reshape(0, 3)
        if coords.ndim != 2:
            raise GridConstructionError(
                f'Coordinates must be a 2-D (N, 3) array, got shape {coords.shape}'
            )

        nColumns = coords.shape[1]
        if nColumns == 2 and dimension == 2:
            coords = np.column_stack((coords, np.zeros(coords.shape[0])))
        elif nColumns != 3:
            raise GridConstructionError(
                f'Coordinates must have 3 columns (or 2 in 2D), got {nColumns}'
            )

        coords.setflags(write=False)
        return coords

    @staticmethod
    def _copyMask(validCoordinates: np.ndarray, size: int) -> np.ndarray:
        '''Private boolean copy of the validity mask.'''
        mask = np.array(validCoordinates, dtype=bool, copy=True)
        if mask.ndim != 1 or mask.shape[0] != size:
            raise GridConstructionError(
                f'Validity mask must have shape ({size},), got {mask.shape}'
            )
        mask.setflags(write=False)
        return mask
