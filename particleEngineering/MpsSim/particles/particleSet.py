# -- MPS Particle Set -- #

'''
Minimal particle container feeding the neighbor-search grid.

Stores positions as an (N, 3) array and a particle type per row.
Ghost particles are placeholders that take no part in the search;
the grid's validity mask is simply particleTypes != GHOST.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class ParticleType(IntEnum):
    '''Particle roles in an MPS simulation.'''

    FLUID = 0
    WALL = 1
    DUMMY_WALL = 2
    GHOST = 3


@dataclass
class ParticleSet:
    '''
    Particle positions and types.

    Parameters:
    -----------
    positions : np.ndarray
        Particle positions [m], shape (N, 3). 2D sets keep z = 0.
    particleTypes : np.ndarray
        ParticleType value per particle, shape (N,)
    '''

    positions: np.ndarray
    particleTypes: np.ndarray

    def __post_init__(self) -> None:
        self.positions = np.asarray(self.positions, dtype=np.float64)
        self.particleTypes = np.asarray(self.particleTypes, dtype=np.int64)
        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            raise ValueError(f'Positions must have shape (N, 3), got {self.positions.shape}')
        if self.particleTypes.shape != (self.positions.shape[0],):
            raise ValueError(
                f'Particle types must have shape ({self.positions.shape[0]},), '
                f'got {self.particleTypes.shape}'
            )

    @property
    def nParticles(self) -> int:
        '''Total number of particles, ghosts included.'''
        return self.positions.shape[0]

    @property
    def nGhost(self) -> int:
        '''Number of ghost particles.'''
        return int(np.sum(self.particleTypes == ParticleType.GHOST))

    @property
    def coordinates(self) -> np.ndarray:
        '''Position matrix handed to the grid, shape (N, 3).'''
        return self.positions

    @property
    def validMask(self) -> np.ndarray:
        '''True for every particle that takes part in the neighbor search.'''
        return self.particleTypes != ParticleType.GHOST

    @classmethod
    def createRandom(
        cls,
        nParticles: int,
        domainSize: float,
        dimension: int,
        ghostFraction: float = 0.0,
        seed: int | None = None,
    ) -> ParticleSet:
        '''
        Uniformly random fluid particles in a square/cube.

        A random subset of ghostFraction * nParticles particles is
        flagged GHOST and their positions set to NaN, mirroring the
        uninitialized rows a real container leaves behind.

        Parameters:
        -----------
        nParticles : int
            Number of particles
        domainSize : float
            Edge length of the sampling domain [m]
        dimension : int
            Number of spatial dimensions (2 or 3)
        ghostFraction : float
            Fraction of particles flagged as ghosts (0-1)
        seed : int | None
            Random seed

        Returns:
        --------
        ParticleSet : Random particle set
        '''
        rng = np.random.default_rng(seed)
        positions = np.zeros((nParticles, 3))
        positions[:, :dimension] = rng.uniform(0.0, domainSize, size=(nParticles, dimension))

        particleTypes = np.full(nParticles, ParticleType.FLUID, dtype=np.int64)
        nGhost = int(round(ghostFraction * nParticles))
        if nGhost > 0:
            ghosts = rng.choice(nParticles, size=nGhost, replace=False)
            particleTypes[ghosts] = ParticleType.GHOST
            positions[ghosts] = np.nan

        return cls(positions=positions, particleTypes=particleTypes)

    @classmethod
    def createLattice(
        cls,
        domainSize: float,
        spacing: float,
        dimension: int,
    ) -> ParticleSet:
        '''
        Fluid particles on a regular lattice filling a square/cube.

        Particles are offset by half a spacing from the domain edge,
        as in an initial MPS particle arrangement.

        Parameters:
        -----------
        domainSize : float
            Edge length of the domain [m]
        spacing : float
            Lattice spacing l0 [m]
        dimension : int
            Number of spatial dimensions (2 or 3)

        Returns:
        --------
        ParticleSet : Lattice particle set
        '''
        axis = np.arange(spacing / 2.0, domainSize, spacing)
        grids = np.meshgrid(*([axis] * dimension), indexing='ij')

        nParticles = grids[0].size
        positions = np.zeros((nParticles, 3))
        for d in range(dimension):
            positions[:, d] = grids[d].ravel()

        return cls(
            positions=positions,
            particleTypes=np.full(nParticles, ParticleType.FLUID, dtype=np.int64),
        )
