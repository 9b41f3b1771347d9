# -- Uniform Grid Cell Indexer -- #

'''
Cell and hash arithmetic for a uniform 2D/3D grid.

A point is mapped to integer cell indices with

    d_axis = ceil((x_axis - lower_axis) / width)

and the indices are folded into one integer hash

    hash = dx + dy * nx + dz * nx * ny

The active-axis count (2 or 3) is fixed at construction. In 2D the
z term is dropped, so the same formulas serve both dimensions.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import itertools
import math

import numpy as np

from particleEngineering.MpsSim.neighbors.protocols import GridConstructionError


# Largest hash that still fits the int64 sort keys
_MAX_HASH = np.iinfo(np.int64).max


class CellIndexer:
    '''
    Dimension-generic point -> cell -> hash mapping.

    Parameters:
    -----------
    dimension : int
        Number of active axes (2 or 3)
    lowerBounds : np.ndarray
        Grid origin, shape (3,) [m]
    gridWidth : float
        Cell edge length [m]
    gridNumber : np.ndarray
        Cells along each active axis, shape (dimension,)
    '''

    def __init__(
        self,
        dimension: int,
        lowerBounds: np.ndarray,
        gridWidth: float,
        gridNumber: np.ndarray,
    ) -> None:
        self._dimension = dimension
        self._lower = np.asarray(lowerBounds, dtype=np.float64)[:dimension].copy()
        self._width = float(gridWidth)
        self._gridNumber = np.asarray(gridNumber, dtype=np.int64)[:dimension].copy()
        if self.nCells - 1 > _MAX_HASH:
            raise GridConstructionError(
                f'Grid of {self._gridNumber.tolist()} cells is too large to hash in int64; '
                f'increase the grid width'
            )

        # Hash strides: (1, nx) in 2D, (1, nx, nx*ny) in 3D
        self._strides = np.concatenate(([1], np.cumprod(self._gridNumber[:-1]))).astype(np.int64)

    @classmethod
    def fromBounds(
        cls,
        dimension: int,
        lowerBounds: np.ndarray,
        higherBounds: np.ndarray,
        gridWidth: float,
    ) -> CellIndexer:
        '''
        Size the grid so that every point inside the bounds is in range.

        The cell count per axis is the cell index of the upper bound
        plus one, i.e. ceil(extent / width) + 1. A zero-extent axis
        gets a single layer of cells.

        Parameters:
        -----------
        dimension : int
            Number of active axes (2 or 3)
        lowerBounds : np.ndarray
            Per-axis minimum of the valid points, shape (3,)
        higherBounds : np.ndarray
            Per-axis maximum of the valid points, shape (3,)
        gridWidth : float
            Cell edge length [m]

        Returns:
        --------
        CellIndexer : Indexer covering the bounding box

        Raises:
        -------
        GridConstructionError : If the cell count overflows the int64 hash
        '''
        lower = np.asarray(lowerBounds, dtype=np.float64)[:dimension]
        higher = np.asarray(higherBounds, dtype=np.float64)[:dimension]
        spans = np.ceil((higher - lower) / gridWidth)
        if not np.all(spans < _MAX_HASH):
            raise GridConstructionError(
                f'Bounding box spans {spans.tolist()} cells; increase the grid width'
            )
        gridNumber = spans.astype(np.int64) + 1
        return cls(dimension, lowerBounds, gridWidth, gridNumber)

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def gridNumber(self) -> np.ndarray:
        '''Cells along each active axis, shape (dimension,).'''
        return self._gridNumber.copy()

    @property
    def nCells(self) -> int:
        '''Total number of cells in the grid.'''
        return math.prod(int(n) for n in self._gridNumber)

    def toIndex(self, points: np.ndarray) -> np.ndarray:
        '''
        Integer cell indices of one or more points.

        Parameters:
        -----------
        points : np.ndarray
            Positions, shape (3,) or (N, 3); axes beyond the
            dimension are ignored

        Returns:
        --------
        np.ndarray : Cell indices, shape (dimension,) or (N, dimension)
        '''
        points = np.asarray(points, dtype=np.float64)
        active = points[..., :self._dimension]
        return np.ceil((active - self._lower) / self._width).astype(np.int64)

    def toHash(self, indices: np.ndarray) -> np.ndarray | int:
        '''
        Fold cell indices into hashes.

        Parameters:
        -----------
        indices : np.ndarray
            Cell indices, shape (dimension,) or (N, dimension)

        Returns:
        --------
        np.ndarray | int : Hash per cell (a Python int for a single cell)
        '''
        indices = np.asarray(indices, dtype=np.int64)
        hashes = indices @ self._strides
        if np.ndim(hashes) == 0:
            return int(hashes)
        return hashes

    def toIndices(self, hashes: np.ndarray | int) -> np.ndarray:
        '''
        Inverse of toHash for in-range cells.

        Parameters:
        -----------
        hashes : np.ndarray | int
            Hash value(s) produced by toHash

        Returns:
        --------
        np.ndarray : Cell indices, shape (dimension,) or (N, dimension)
        '''
        remainder = np.asarray(hashes, dtype=np.int64)
        axes = []
        for n in self._gridNumber:
            axes.append(remainder % n)
            remainder = remainder // n
        return np.stack(axes, axis=-1)

    def contains(self, indices: np.ndarray) -> np.ndarray | bool:
        '''True where every axis index lies in [0, gridNumber).'''
        indices = np.asarray(indices, dtype=np.int64)
        inside = np.all((indices >= 0) & (indices < self._gridNumber), axis=-1)
        if np.ndim(inside) == 0:
            return bool(inside)
        return inside

    def blockHashes(self, point: np.ndarray, radius: float) -> list[int]:
        '''
        Hashes of the in-range cells that can hold a point within radius.

        The block is the 3^dim cells around the point's own cell. An
        axis is widened by one more layer where rounding in toIndex puts
        point -/+ radius beyond that block, so a particle closer than
        radius is always inside it.

        Parameters:
        -----------
        point : np.ndarray
            Centre position, shape (3,)
        radius : float
            Search radius [m]

        Returns:
        --------
        list[int] : Hashes in ascending order (x varies fastest)
        '''
        point = np.asarray(point, dtype=np.float64)
        cell = self.toIndex(point)
        lo = np.minimum(cell - 1, self.toIndex(point - radius))
        hi = np.maximum(cell + 1, self.toIndex(point + radius))
        lo = np.maximum(lo, 0)
        hi = np.minimum(hi, self._gridNumber - 1)
        if np.any(hi < lo):
            return []

        # product varies the last axis fastest; reversed, x varies fastest
        ranges = [range(int(l), int(h) + 1) for l, h in zip(lo[::-1], hi[::-1])]
        cells = np.array([c[::-1] for c in itertools.product(*ranges)], dtype=np.int64)
        return [int(h) for h in cells @ self._strides]
