# -- Reference Search Tests -- #

'''
Brute-force and KD-tree references agree with each other and the grid.

Sean Bowman [02/12/2026]
'''

import numpy as np
import pytest

from particleEngineering.MpsSim.neighbors.bruteForce import (
    bruteForceNeighbors,
    compareNeighborLists,
    kdTreeNeighbors,
)
from particleEngineering.MpsSim.neighbors.grid import Grid


@pytest.mark.parametrize('dimension', [2, 3])
def testKdTreeMatchesBruteForce(dimension):
    rng = np.random.default_rng(100 + dimension)
    coords = rng.uniform(0.0, 1.0, size=(800, 3))
    valid = rng.uniform(size=800) > 0.05

    brute = bruteForceNeighbors(coords, valid, 0.1, dimension)
    tree = kdTreeNeighbors(coords, valid, 0.1, dimension)
    assert compareNeighborLists(brute, tree) == 0
    for b, t in zip(brute, tree):
        np.testing.assert_array_equal(b, t)


def testReferencesUseStrictRadius():
    coords = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 0.5]])
    valid = np.ones(3, dtype=bool)
    for search in (bruteForceNeighbors, kdTreeNeighbors):
        result = search(coords, valid, 1.0, 2)
        assert result[0].tolist() == [2]
        assert result[1].tolist() == []


def testReferencesSkipInvalid():
    coords = np.array([[0.0, 0.0, 0.0], [0.1, 0.0, 0.0], [np.nan, 0.0, 0.0]])
    valid = np.array([True, False, False])
    for search in (bruteForceNeighbors, kdTreeNeighbors):
        result = search(coords, valid, 1.0, 3)
        assert [r.tolist() for r in result] == [[], [], []]


def testGridAgreesWithKdTreeOnLattice():
    axis = np.arange(0.005, 0.2, 0.01)
    xx, yy = np.meshgrid(axis, axis, indexing='ij')
    coords = np.column_stack([xx.ravel(), yy.ravel(), np.zeros(xx.size)])
    valid = np.ones(coords.shape[0], dtype=bool)

    grid = Grid(0.021, coords, valid, 2)
    lists = [grid.getNeighbors(i) for i in range(grid.size)]
    reference = kdTreeNeighbors(coords, valid, 0.021, 2)
    assert compareNeighborLists(lists, reference) == 0


def testCompareNeighborListsCountsDifferences():
    first = [np.array([1, 2]), np.array([0]), np.array([], dtype=np.int64)]
    second = [np.array([2, 1]), np.array([]), np.array([], dtype=np.int64)]
    assert compareNeighborLists(first, second) == 1

    with pytest.raises(ValueError):
        compareNeighborLists(first, second[:2])


def testBadCoordinateShapeRejected():
    with pytest.raises(ValueError):
        bruteForceNeighbors(np.zeros((4, 2)), np.ones(4, dtype=bool), 1.0, 3)
