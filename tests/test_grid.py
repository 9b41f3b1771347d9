# -- Uniform Grid Tests -- #

'''
Construction, invariants, and neighbor queries of the MPS grid.

Sean Bowman [02/12/2026]
'''

import copy

import numpy as np
import pytest

from particleEngineering.MpsSim.neighbors.bruteForce import bruteForceNeighbors
from particleEngineering.MpsSim.neighbors.grid import Grid, pairDistances
from particleEngineering.MpsSim.neighbors.protocols import GridConstructionError, GridIndexError


#--------------------------------------------------------------------#
# -- Fixtures -- #
#--------------------------------------------------------------------#

@pytest.fixture
def fivePoints():
    '''Two clusters in 2D: three points near the origin, two near (5, 5).'''
    coords = np.array([
        [0.0, 0.0, 0.0],
        [0.5, 0.0, 0.0],
        [0.0, 0.5, 0.0],
        [5.0, 5.0, 0.0],
        [5.5, 5.0, 0.0],
    ])
    return coords, np.ones(5, dtype=bool)


def randomCloud(nParticles, dimension, ghostFraction, seed):
    rng = np.random.default_rng(seed)
    coords = np.zeros((nParticles, 3))
    coords[:, :dimension] = rng.uniform(0.0, 1.0, size=(nParticles, dimension))
    valid = rng.uniform(size=nParticles) >= ghostFraction
    coords[~valid] = np.nan
    return coords, valid


def asSets(grid, indices, inBox=False):
    query = grid.getNeighborsInBox if inBox else grid.getNeighbors
    return {i: set(query(i).tolist()) for i in indices}


#--------------------------------------------------------------------#
# -- Small Scenarios -- #
#--------------------------------------------------------------------#

def testFivePointScenario(fivePoints):
    '''Each cluster sees only its own members within the unit radius.'''
    coords, valid = fivePoints
    grid = Grid(1.0, coords, valid, 2)

    assert grid.getNeighbors(0).tolist() == [1, 2]
    assert set(grid.getNeighbors(3).tolist()) == {4}
    assert set(grid.getNeighbors(4).tolist()) == {3}
    # (0.5, 0) and (0, 0.5) are 0.707 apart, inside the radius
    assert set(grid.getNeighbors(1).tolist()) == {0, 2}
    assert set(grid.getNeighbors(2).tolist()) == {0, 1}


def testTwoColumnCoordinatesAcceptedIn2D(fivePoints):
    coords, valid = fivePoints
    grid = Grid(1.0, coords[:, :2], valid, 2)
    assert grid.getNeighbors(0).tolist() == [1, 2]


def testDistanceIsStrict():
    '''A particle exactly at gridWidth is not a neighbor.'''
    coords = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.99]])
    grid = Grid(1.0, coords, np.ones(3, dtype=bool), 3)
    assert grid.getNeighbors(0).tolist() == [2]
    assert 1 in grid.getNeighborsInBox(0).tolist()


def testQueryReturnsIntegerArray(fivePoints):
    coords, valid = fivePoints
    grid = Grid(1.0, coords, valid, 2)
    neighbors = grid.getNeighbors(0)
    assert isinstance(neighbors, np.ndarray)
    assert neighbors.dtype == np.int64


#--------------------------------------------------------------------#
# -- Introspection and Invariants -- #
#--------------------------------------------------------------------#

def testAccessors(fivePoints):
    coords, valid = fivePoints
    grid = Grid(1.0, coords, valid, 2)
    assert grid.size == 5
    assert grid.dimension == 2
    assert grid.gridWidth == 1.0
    assert grid.nValid == 5


def testGridNumberCoversBoundingBox(fivePoints):
    coords, valid = fivePoints
    grid = Grid(1.0, coords, valid, 2)
    np.testing.assert_allclose(grid.lowerBounds, [0.0, 0.0, 0.0])
    np.testing.assert_allclose(grid.higherBounds, [5.5, 5.0, 0.0])
    # ceil(5.5) + 1, ceil(5.0) + 1, unused z
    assert grid.gridNumber == (7, 6, 0)


def testEveryValidParticleHashedOnce():
    coords, valid = randomCloud(400, 3, 0.2, seed=1)
    grid = Grid(0.1, coords, valid, 3)
    gridHash = grid.gridHash

    assert gridHash.shape == (int(valid.sum()), 2)
    assert sorted(gridHash[:, 1].tolist()) == np.flatnonzero(valid).tolist()
    assert np.all(np.diff(gridHash[:, 0]) >= 0)


def testBeginHashRangesPartitionSortedList():
    coords, valid = randomCloud(400, 2, 0.1, seed=2)
    grid = Grid(0.07, coords, valid, 2)
    gridHash = grid.gridHash
    ranges = sorted(grid.beginHash.items(), key=lambda item: item[1][0])

    position = 0
    for cellHash, (begin, end) in ranges:
        assert begin == position
        assert end > begin
        assert np.all(gridHash[begin:end, 0] == cellHash)
        position = end
    assert position == gridHash.shape[0]


def testCellOfMatchesStoredHash():
    coords, valid = randomCloud(200, 3, 0.0, seed=3)
    grid = Grid(0.15, coords, valid, 3)
    nx, ny, _ = grid.gridNumber
    stored = dict(zip(grid.gridHash[:, 1].tolist(), grid.gridHash[:, 0].tolist()))
    for i in range(grid.size):
        dx, dy, dz = grid.cellOf(i)
        assert 0 <= dx < nx and 0 <= dy < ny
        assert dx + dy * nx + dz * nx * ny == stored[i]


def testCellOfIn2DHasZeroZ(fivePoints):
    coords, valid = fivePoints
    coords = coords.copy()
    coords[:, 2] = 42.0
    grid = Grid(1.0, coords, valid, 2)
    assert grid.cellOf(4) == (6, 5, 0)


def testParticlesSharingCellKeepIndexOrder():
    coords = np.array([[0.3, 0.3, 0.0], [0.1, 0.2, 0.0], [0.2, 0.1, 0.0], [0.0, 0.0, 0.0]])
    grid = Grid(1.0, coords, np.ones(4, dtype=bool), 2)
    # Particles 0-2 share cell (1, 1); stable sort keeps them ascending
    begin, end = grid.beginHash[grid.gridHash[-1, 0]]
    assert grid.gridHash[begin:end, 1].tolist() == [0, 1, 2]


#--------------------------------------------------------------------#
# -- Properties Against Brute Force -- #
#--------------------------------------------------------------------#

@pytest.mark.parametrize('dimension, width', [(2, 0.05), (3, 0.12)])
def testCompletenessAgainstBruteForce(dimension, width):
    coords, valid = randomCloud(1500, dimension, 0.1, seed=10 + dimension)
    grid = Grid(width, coords, valid, dimension)
    reference = bruteForceNeighbors(coords, valid, width, dimension)

    for i in np.flatnonzero(valid):
        assert set(grid.getNeighbors(i).tolist()) == set(reference[i].tolist())


@pytest.mark.parametrize('dimension', [2, 3])
def testSelfExclusionSymmetryAndRadius(dimension):
    width = 0.1
    coords, valid = randomCloud(600, dimension, 0.1, seed=20 + dimension)
    grid = Grid(width, coords, valid, dimension)
    validIndices = np.flatnonzero(valid)
    neighborSets = asSets(grid, validIndices)

    for i in validIndices:
        neighbors = grid.getNeighbors(i)
        assert i not in neighborSets[i]
        assert len(neighbors) == len(neighborSets[i])
        assert np.all(valid[neighbors])
        if len(neighbors):
            assert np.all(pairDistances(coords[neighbors], coords[i], dimension) < width)
        for j in neighborSets[i]:
            assert i in neighborSets[j]


@pytest.mark.parametrize('dimension', [2, 3])
def testBoxQueryIsSuperset(dimension):
    coords, valid = randomCloud(500, dimension, 0.1, seed=30 + dimension)
    grid = Grid(0.1, coords, valid, dimension)
    for i in np.flatnonzero(valid):
        box = grid.getNeighborsInBox(i)
        assert set(grid.getNeighbors(i).tolist()) <= set(box.tolist())
        assert i not in box.tolist()
        assert len(set(box.tolist())) == len(box)


def testDimensionReductionIgnoresThirdAxis():
    coords, valid = randomCloud(500, 2, 0.0, seed=40)
    shifted = coords.copy()
    shifted[:, 2] = np.random.default_rng(41).uniform(-100.0, 100.0, size=500)

    flat = Grid(0.08, coords, valid, 2)
    noisy = Grid(0.08, shifted, valid, 2)
    for i in range(500):
        np.testing.assert_array_equal(flat.getNeighbors(i), noisy.getNeighbors(i))


def testDeterministicAcrossConstructions():
    coords, valid = randomCloud(500, 3, 0.1, seed=50)
    first = Grid(0.15, coords, valid, 3)
    second = Grid(0.15, coords, valid, 3)
    for i in range(500):
        np.testing.assert_array_equal(first.getNeighbors(i), second.getNeighbors(i))
        np.testing.assert_array_equal(first.getNeighborsInBox(i), second.getNeighborsInBox(i))


def testNeighborAcrossRoundedCellBoundary():
    '''Particles 1 and 2 are just under one width apart but two cells apart.'''
    x = np.array([-0.37, 0.13000000000000006, 0.23000000000000004])
    coords = np.column_stack([x, np.zeros(3), np.zeros(3)])
    grid = Grid(0.1, coords, np.ones(3, dtype=bool), 2)

    assert grid.cellOf(2)[0] - grid.cellOf(1)[0] == 2
    assert grid.getNeighbors(1).tolist() == [2]
    assert grid.getNeighbors(2).tolist() == [1]
    assert 2 in grid.getNeighborsInBox(1).tolist()


def testCompletenessNearCellBoundaries():
    '''Positions on and one ulp either side of every cell edge.'''
    edges = np.arange(-20, 21) * 0.1 + 0.03
    x = np.concatenate([edges, np.nextafter(edges, -np.inf), np.nextafter(edges, np.inf)])
    coords = np.column_stack([x, np.zeros_like(x), np.zeros_like(x)])
    valid = np.ones(x.shape[0], dtype=bool)

    for dimension in (2, 3):
        grid = Grid(0.1, coords, valid, dimension)
        reference = bruteForceNeighbors(coords, valid, 0.1, dimension)
        for i in range(x.shape[0]):
            assert set(grid.getNeighbors(i).tolist()) == set(reference[i].tolist())


#--------------------------------------------------------------------#
# -- Invalid Particles -- #
#--------------------------------------------------------------------#

def testInvalidParticleExcludedEverywhere(fivePoints):
    coords, valid = fivePoints
    valid = valid.copy()
    valid[1] = False
    grid = Grid(1.0, coords, valid, 2)

    assert grid.nValid == 4
    assert grid.getNeighbors(0).tolist() == [2]
    assert grid.getNeighbors(2).tolist() == [0]
    for i in (0, 2, 3, 4):
        assert 1 not in grid.getNeighborsInBox(i).tolist()


def testInvalidRowsDoNotWidenBounds(fivePoints):
    coords, valid = fivePoints
    coords = np.vstack([coords, [[-1.0e6, 1.0e6, 0.0]]])
    valid = np.append(valid, False)
    grid = Grid(1.0, coords, valid, 2)

    np.testing.assert_allclose(grid.lowerBounds, [0.0, 0.0, 0.0])
    np.testing.assert_allclose(grid.higherBounds, [5.5, 5.0, 0.0])
    assert grid.gridNumber == (7, 6, 0)


def testInvalidRowsMayHoldGarbage(fivePoints):
    coords, valid = fivePoints
    coords = np.vstack([coords, [[np.nan, np.inf, -np.inf]]])
    valid = np.append(valid, False)
    grid = Grid(1.0, coords, valid, 2)

    assert grid.getNeighbors(0).tolist() == [1, 2]
    # Non-finite source coordinates give nothing to search around
    assert grid.getNeighbors(5).tolist() == []


def testInvalidSourceIsQueriedByItsCoordinates(fivePoints):
    '''The grid does not reject invalid sources; callers must skip them.'''
    coords, valid = fivePoints
    valid = valid.copy()
    valid[0] = False
    grid = Grid(1.0, coords, valid, 2)
    assert set(grid.getNeighbors(0).tolist()) == {1, 2}
    assert 0 not in grid.getNeighbors(1).tolist()


#--------------------------------------------------------------------#
# -- Degenerate Grids -- #
#--------------------------------------------------------------------#

def testAllInvalidGridIsEmpty(fivePoints):
    coords, _ = fivePoints
    grid = Grid(1.0, coords, np.zeros(5, dtype=bool), 2)

    assert grid.nValid == 0
    assert grid.nOccupiedCells == 0
    assert grid.gridHash.shape == (0, 2)
    for i in range(5):
        assert grid.getNeighbors(i).tolist() == []
        assert grid.getNeighborsInBox(i).tolist() == []


def testZeroParticleGrid():
    grid = Grid(1.0, np.zeros((0, 3)), np.zeros(0, dtype=bool), 3)
    assert grid.size == 0
    assert grid.beginHash == {}
    with pytest.raises(GridIndexError):
        grid.getNeighbors(0)


def testSingleParticleHasNoNeighbors():
    grid = Grid(0.5, np.array([[1.0, 2.0, 3.0]]), np.array([True]), 3)
    assert grid.gridNumber == (1, 1, 1)
    assert grid.getNeighbors(0).tolist() == []


def testCollinearParticles():
    '''Zero extent along y gives a single row of cells.'''
    coords = np.column_stack([np.arange(10) * 0.4, np.zeros(10), np.zeros(10)])
    grid = Grid(1.0, coords, np.ones(10, dtype=bool), 2)
    assert grid.gridNumber[1] == 1
    assert grid.getNeighbors(5).tolist() == [3, 4, 6, 7]


#--------------------------------------------------------------------#
# -- Errors -- #
#--------------------------------------------------------------------#

@pytest.mark.parametrize('width', [0.0, -1.0, float('nan'), float('inf'), 'wide'])
def testNonPositiveWidthRejected(fivePoints, width):
    coords, valid = fivePoints
    with pytest.raises(GridConstructionError):
        Grid(width, coords, valid, 2)


def testConstructionErrorIsValueError(fivePoints):
    coords, valid = fivePoints
    with pytest.raises(ValueError):
        Grid(0.0, coords, valid, 2)


@pytest.mark.parametrize('dimension', [0, 1, 4])
def testUnsupportedDimensionRejected(fivePoints, dimension):
    coords, valid = fivePoints
    with pytest.raises(GridConstructionError):
        Grid(1.0, coords, valid, dimension)


def testMaskLengthMismatchRejected(fivePoints):
    coords, _ = fivePoints
    with pytest.raises(GridConstructionError):
        Grid(1.0, coords, np.ones(4, dtype=bool), 2)


def testMalformedCoordinatesRejected(fivePoints):
    coords, valid = fivePoints
    with pytest.raises(GridConstructionError):
        Grid(1.0, np.zeros((5, 4)), valid, 3)
    with pytest.raises(GridConstructionError):
        Grid(1.0, coords[:, :2], valid, 3)
    with pytest.raises(GridConstructionError):
        Grid(1.0, np.zeros(5), valid, 2)


def testNonFiniteValidCoordinateRejected(fivePoints):
    coords, valid = fivePoints
    coords = coords.copy()
    coords[2, 1] = np.nan
    with pytest.raises(GridConstructionError):
        Grid(1.0, coords, valid, 2)


def testUnhashableGridRejected():
    '''nx * ny * nz beyond int64 would make distant cells share a hash.'''
    coords = np.array([[0.0, 0.0, 0.0], [2.0**22, 2.0**22, 2.0**20]])
    with pytest.raises(GridConstructionError):
        Grid(1.0, coords, np.ones(2, dtype=bool), 3)


def testFarCornerOfLargeGridIsSearched():
    far = 2.0**20
    coords = np.array([[0.0, 0.0, 0.0], [far, far, far], [far - 0.5, far, far]])
    grid = Grid(1.0, coords, np.ones(3, dtype=bool), 3)
    assert grid.getNeighbors(1).tolist() == [2]
    assert grid.getNeighbors(0).tolist() == []


@pytest.mark.parametrize('index', [-1, 5, 100, 1.5])
def testOutOfRangeIndexRejected(fivePoints, index):
    coords, valid = fivePoints
    grid = Grid(1.0, coords, valid, 2)
    with pytest.raises(GridIndexError):
        grid.getNeighbors(index)
    with pytest.raises(IndexError):
        grid.getNeighborsInBox(index)


def testNumpyIntegerIndexAccepted(fivePoints):
    coords, valid = fivePoints
    grid = Grid(1.0, coords, valid, 2)
    assert grid.getNeighbors(np.int32(0)).tolist() == [1, 2]


#--------------------------------------------------------------------#
# -- Snapshot Ownership -- #
#--------------------------------------------------------------------#

def testCallerBuffersCanChangeAfterConstruction(fivePoints):
    coords, valid = fivePoints
    coords = coords.copy()
    valid = valid.copy()
    grid = Grid(1.0, coords, valid, 2)

    coords[1] = [100.0, 100.0, 0.0]
    valid[2] = False

    assert grid.getNeighbors(0).tolist() == [1, 2]


def testGridCannotBeCopied(fivePoints):
    coords, valid = fivePoints
    grid = Grid(1.0, coords, valid, 2)
    with pytest.raises(TypeError):
        copy.copy(grid)
    with pytest.raises(TypeError):
        copy.deepcopy(grid)


def testExposedArraysAreDetached(fivePoints):
    coords, valid = fivePoints
    grid = Grid(1.0, coords, valid, 2)
    lower = grid.lowerBounds
    lower[0] = -50.0
    table = grid.beginHash
    table.clear()

    np.testing.assert_allclose(grid.lowerBounds, [0.0, 0.0, 0.0])
    assert grid.nOccupiedCells == 5
    assert grid.getNeighbors(0).tolist() == [1, 2]
