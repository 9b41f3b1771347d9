# -- Neighbor Lists and Pairs -- #

'''
Consumer-side loops over a built Grid.

The grid answers one particle at a time. The helpers here run that
query for every valid particle, skipping ghosts as the grid expects
its callers to do, and collect the results as per-particle lists or
as unique (i, j) pairs for pairwise interaction sums.

Queries on a built grid are independent, so the per-particle loop can
be split across worker processes. Construction stays serial.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import multiprocessing as mp
from typing import Iterator

import numpy as np
from tqdm import tqdm

from particleEngineering.MpsSim import constants as const
from particleEngineering.MpsSim.neighbors.protocols import NeighborSearch


# Grid held by each worker process, set once by the pool initializer
_workerGrid: NeighborSearch | None = None
_workerInBox: bool = False


def _initWorker(grid: NeighborSearch, inBox: bool) -> None:
    global _workerGrid, _workerInBox
    _workerGrid = grid
    _workerInBox = inBox


def _queryChunk(indices: np.ndarray) -> list[tuple[int, np.ndarray]]:
    query = _workerGrid.getNeighborsInBox if _workerInBox else _workerGrid.getNeighbors
    return [(int(i), query(int(i))) for i in indices]


def _checkMask(grid: NeighborSearch, validMask: np.ndarray) -> np.ndarray:
    mask = np.asarray(validMask, dtype=bool)
    if mask.shape != (grid.size,):
        raise ValueError(f'Validity mask must have shape ({grid.size},), got {mask.shape}')
    return mask


#--------------------------------------------------------------------#
# -- Per-Particle Iteration -- #
#--------------------------------------------------------------------#

def iterNeighbors(
    grid: NeighborSearch,
    validMask: np.ndarray,
    inBox: bool = False,
) -> Iterator[tuple[int, np.ndarray]]:
    '''
    Yield (i, neighbors) for every valid particle in index order.

    Parameters:
    -----------
    grid : NeighborSearch
        Grid built from the same snapshot as validMask
    validMask : np.ndarray
        Boolean mask of particles to query, shape (size,)
    inBox : bool
        Return the cell-block candidates without the distance test

    Yields:
    -------
    tuple[int, np.ndarray] : Particle index and its neighbor indices
    '''
    mask = _checkMask(grid, validMask)
    query = grid.getNeighborsInBox if inBox else grid.getNeighbors
    for i in np.flatnonzero(mask):
        yield int(i), query(int(i))


def buildNeighborLists(
    grid: NeighborSearch,
    validMask: np.ndarray,
    workers: int = 1,
    showProgress: bool = False,
    inBox: bool = False,
    chunkSize: int = const.queryChunkSize,
) -> list[np.ndarray]:
    '''
    Neighbor arrays for every particle of the grid.

    Invalid particles get an empty array. With workers > 1 the valid
    indices are split into contiguous chunks and queried in a
    multiprocessing pool; the result is identical to the serial loop.

    Parameters:
    -----------
    grid : NeighborSearch
        Built grid
    validMask : np.ndarray
        Boolean mask of particles to query, shape (size,)
    workers : int
        Number of worker processes (1 runs in-process)
    showProgress : bool
        Display a tqdm progress bar over queried particles
    inBox : bool
        Skip the exact distance test (cell-block candidates only)
    chunkSize : int
        Particles per chunk handed to a worker

    Returns:
    --------
    list[np.ndarray] : One int64 array per particle, length grid.size

    Raises:
    -------
    ValueError : If workers or chunkSize is less than 1
    '''
    if workers < 1:
        raise ValueError(f'Worker count must be at least 1, got {workers}')
    if chunkSize < 1:
        raise ValueError(f'Chunk size must be at least 1, got {chunkSize}')

    mask = _checkMask(grid, validMask)
    validIndices = np.flatnonzero(mask)
    lists = [np.empty(0, dtype=np.int64) for _ in range(grid.size)]

    pbar = tqdm(total=len(validIndices), desc='Neighbor queries', disable=not showProgress)

    if workers == 1:
        for i, neighbors in iterNeighbors(grid, mask, inBox=inBox):
            lists[i] = neighbors
            pbar.update(1)
    else:
        chunks = [
            validIndices[start:start + chunkSize]
            for start in range(0, len(validIndices), chunkSize)
        ]
        with mp.Pool(workers, initializer=_initWorker, initargs=(grid, inBox)) as pool:
            for results in pool.imap(_queryChunk, chunks):
                for i, neighbors in results:
                    lists[i] = neighbors
                pbar.update(len(results))

    pbar.close()
    return lists


def neighborCounts(lists: list[np.ndarray]) -> np.ndarray:
    '''Number of neighbors per particle, shape (len(lists),).'''
    return np.array([len(n) for n in lists], dtype=np.int64)


#--------------------------------------------------------------------#
# -- Unique Pairs -- #
#--------------------------------------------------------------------#

def findPairs(grid: NeighborSearch, validMask: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    '''
    All unique neighbor pairs (i, j) with i < j.

    Pairs are ordered by i, then by j in the grid's query order.

    Parameters:
    -----------
    grid : NeighborSearch
        Built grid
    validMask : np.ndarray
        Boolean mask of particles to query, shape (size,)

    Returns:
    --------
    tuple[np.ndarray, np.ndarray] :
        (iIndices, jIndices) arrays of neighbor pair indices
    '''
    iChunks: list[np.ndarray] = []
    jChunks: list[np.ndarray] = []

    for i, neighbors in iterNeighbors(grid, validMask):
        upper = neighbors[neighbors > i]
        if upper.shape[0] == 0:
            continue
        iChunks.append(np.full(upper.shape[0], i, dtype=np.int64))
        jChunks.append(upper)

    if not iChunks:
        return (np.array([], dtype=np.int64), np.array([], dtype=np.int64))

    return (np.concatenate(iChunks), np.concatenate(jChunks))
