# -- Reference Neighbor Searches -- #

'''
Reference searches used to validate the grid.

bruteForceNeighbors checks every pair directly (O(N^2)) with the same
distance formula as the grid. kdTreeNeighbors uses scipy's cKDTree for
larger clouds where the quadratic loop is too slow. Both return one
ascending index array per particle, empty for invalid particles.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import numpy as np
from scipy.spatial import cKDTree

from particleEngineering.MpsSim.neighbors.grid import pairDistances


def _activeCoordinates(coordinates: np.ndarray, dimension: int) -> np.ndarray:
    coords = np.asarray(coordinates, dtype=np.float64)
    if coords.ndim != 2 or coords.shape[1] < dimension:
        raise ValueError(f'Coordinates must have at least {dimension} columns, got {coords.shape}')
    return coords[:, :dimension]


def bruteForceNeighbors(
    coordinates: np.ndarray,
    validMask: np.ndarray,
    radius: float,
    dimension: int,
) -> list[np.ndarray]:
    '''
    Exact O(N^2) fixed-radius search.

    Parameters:
    -----------
    coordinates : np.ndarray
        Particle positions, shape (N, 2 or 3)
    validMask : np.ndarray
        Boolean mask, shape (N,)
    radius : float
        Neighbor radius [m]; neighbors satisfy distance < radius
    dimension : int
        Number of axes in the distance (2 or 3)

    Returns:
    --------
    list[np.ndarray] : Ascending neighbor indices per particle
    '''
    coords = _activeCoordinates(coordinates, dimension)
    mask = np.asarray(validMask, dtype=bool)
    validIndices = np.flatnonzero(mask)
    validCoords = coords[validIndices]

    result = [np.empty(0, dtype=np.int64) for _ in range(coords.shape[0])]
    for i in validIndices:
        distances = pairDistances(validCoords, coords[i], dimension)
        hits = validIndices[distances < radius]
        result[i] = hits[hits != i].astype(np.int64)
    return result


def kdTreeNeighbors(
    coordinates: np.ndarray,
    validMask: np.ndarray,
    radius: float,
    dimension: int,
) -> list[np.ndarray]:
    '''
    Fixed-radius search through scipy.spatial.cKDTree.

    query_ball_point includes points at exactly the radius, so its
    hits are filtered again with the strict test.

    Parameters:
    -----------
    coordinates : np.ndarray
        Particle positions, shape (N, 2 or 3)
    validMask : np.ndarray
        Boolean mask, shape (N,)
    radius : float
        Neighbor radius [m]
    dimension : int
        Number of axes in the distance (2 or 3)

    Returns:
    --------
    list[np.ndarray] : Ascending neighbor indices per particle
    '''
    coords = _activeCoordinates(coordinates, dimension)
    mask = np.asarray(validMask, dtype=bool)
    validIndices = np.flatnonzero(mask)

    result = [np.empty(0, dtype=np.int64) for _ in range(coords.shape[0])]
    if validIndices.shape[0] == 0:
        return result

    validCoords = coords[validIndices]
    tree = cKDTree(validCoords)
    hitLists = tree.query_ball_point(validCoords, r=radius)

    for local, hits in enumerate(hitLists):
        i = validIndices[local]
        hits = np.asarray(hits, dtype=np.int64)
        distances = pairDistances(validCoords[hits], coords[i], dimension)
        globalHits = np.sort(validIndices[hits[distances < radius]])
        result[i] = globalHits[globalHits != i].astype(np.int64)
    return result


def compareNeighborLists(first: list[np.ndarray], second: list[np.ndarray]) -> int:
    '''
    Count particles whose unordered neighbor sets differ.

    Raises:
    -------
    ValueError : If the lists cover different particle counts
    '''
    if len(first) != len(second):
        raise ValueError(f'Neighbor lists differ in length: {len(first)} vs {len(second)}')
    return sum(
        1 for a, b in zip(first, second)
        if set(np.asarray(a).tolist()) != set(np.asarray(b).tolist())
    )
