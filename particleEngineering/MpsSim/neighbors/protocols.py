# -- Neighbor Search Protocols -- #

'''
Protocols, errors, and the run configuration for neighbor search.

The grid consumes a coordinate snapshot from a CoordinateProvider
(the particle container) and hands neighbor index arrays back to the
consumer (the solver). GridConfig collects the parameters used by the
runner and scenario builders.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from particleEngineering.MpsSim import constants as const


######################################################################
# -- Errors -- #
######################################################################

class GridConstructionError(ValueError):
    '''Raised when a Grid cannot be built from the given inputs.'''


class GridIndexError(IndexError):
    '''Raised when a query index lies outside [0, size).'''


######################################################################
# -- Protocols -- #
######################################################################

class CoordinateProvider(Protocol):
    '''Protocol for particle containers that feed the grid.'''

    @property
    def coordinates(self) -> np.ndarray:
        '''Particle positions, shape (N, 3).'''
        ...

    @property
    def validMask(self) -> np.ndarray:
        '''Boolean mask of particles taking part in the search, shape (N,).'''
        ...


class NeighborSearch(Protocol):
    '''Protocol for fixed-radius neighbor search structures.'''

    def getNeighbors(self, index: int) -> np.ndarray:
        '''
        Indices of valid particles strictly within the search radius.

        Parameters:
        -----------
        index : int
            Source particle index in [0, size)

        Returns:
        --------
        np.ndarray : Neighbor indices, excluding index itself
        '''
        ...

    def getNeighborsInBox(self, index: int) -> np.ndarray:
        '''Indices of valid particles in the adjacent cells (no distance test).'''
        ...

    @property
    def size(self) -> int:
        '''Total number of particles, valid or not.'''
        ...

    @property
    def dimension(self) -> int:
        '''Number of spatial dimensions (2 or 3).'''
        ...

    @property
    def gridWidth(self) -> float:
        '''Search radius and cell edge length [m].'''
        ...


######################################################################
# -- Run Configuration -- #
######################################################################

@dataclass
class GridConfig:
    '''
    Configuration for a neighbor search run.

    Parameters:
    -----------
    gridWidth : float
        Cell width and interaction radius [m]
    dimension : int
        Number of spatial dimensions (2 or 3)
    nParticles : int
        Number of particles for the 'random' layout
    domainSize : float
        Edge length of the sampling domain [m]
    ghostFraction : float
        Fraction of particles flagged as ghosts (0-1)
    seed : int
        Random seed for reproducible clouds
    layout : str
        Particle layout: 'random' or 'lattice'
    particleSpacing : float
        Lattice spacing for the 'lattice' layout [m]
    workers : int
        Worker processes for the query loop
    validate : bool
        Whether to check the grid against a reference search
    '''

    gridWidth: float = const.defaultGridWidth
    dimension: int = const.defaultDimension
    nParticles: int = const.defaultParticleCount
    domainSize: float = const.defaultDomainSize
    ghostFraction: float = const.defaultGhostFraction
    seed: int = const.defaultSeed
    layout: str = 'random'
    particleSpacing: float = const.defaultParticleSpacing
    workers: int = const.defaultWorkers
    validate: bool = True

    def __post_init__(self) -> None:
        if self.layout not in const.particleLayouts:
            raise ValueError(f'Unknown particle layout: {self.layout}')
        if self.dimension not in (2, 3):
            raise ValueError(f'Dimension must be 2 or 3, got {self.dimension}')
        if not 0.0 <= self.ghostFraction <= 1.0:
            raise ValueError(f'Ghost fraction must lie in [0, 1], got {self.ghostFraction}')

    @property
    def influenceRadius(self) -> float:
        '''Alias for gridWidth, the MPS influence radius re [m].'''
        return self.gridWidth

    @classmethod
    def fromJson(cls, configPath: str) -> GridConfig:
        '''
        Load configuration from a JSON file.

        Reads the 'grid', 'particles', and 'run' sections. Missing
        keys fall back to the defaults in constants.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file

        Returns:
        --------
        GridConfig : Loaded configuration
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        gridSection = data.get('grid', {})
        particleSection = data.get('particles', {})
        runSection = data.get('run', {})

        return cls(
            gridWidth=gridSection.get('width', const.defaultGridWidth),
            dimension=gridSection.get('dimension', const.defaultDimension),
            nParticles=particleSection.get('count', const.defaultParticleCount),
            domainSize=particleSection.get('domainSize', const.defaultDomainSize),
            ghostFraction=particleSection.get('ghostFraction', const.defaultGhostFraction),
            seed=particleSection.get('seed', const.defaultSeed),
            layout=particleSection.get('layout', 'random'),
            particleSpacing=particleSection.get('spacing', const.defaultParticleSpacing),
            workers=runSection.get('workers', const.defaultWorkers),
            validate=runSection.get('validate', True),
        )

    @classmethod
    def small2D(cls) -> GridConfig:
        '''
        Small 2D random cloud for quick checks.

        500 particles, validates in well under a second.
        '''
        return cls(dimension=2, nParticles=500, domainSize=0.1)

    @classmethod
    def standard2D(cls) -> GridConfig:
        '''
        Standard 2D lattice, the layout of a dam-break column.

        40 000 lattice sites at 2.1 l0 influence radius.
        '''
        return cls(
            dimension=2,
            layout='lattice',
            domainSize=2.0,
            particleSpacing=0.01,
            gridWidth=const.influenceRadiusRatio * 0.01,
        )

    @classmethod
    def small3D(cls) -> GridConfig:
        '''Small 3D random cloud, ~1000 particles.'''
        return cls(dimension=3, nParticles=1000, domainSize=0.1)

    @classmethod
    def standard3D(cls) -> GridConfig:
        '''
        Standard 3D lattice.

        ~27 000 lattice sites, exercises the 27-cell stencil.
        '''
        return cls(
            dimension=3,
            layout='lattice',
            domainSize=0.3,
            particleSpacing=0.01,
            gridWidth=const.influenceRadiusRatio * 0.01,
        )

    @classmethod
    def fromPreset(cls, preset: str) -> GridConfig:
        '''
        Build a configuration from a preset name.

        Raises:
        -------
        ValueError : If the preset is unknown
        '''
        presets = {
            'small': cls.small2D,
            'standard': cls.standard2D,
            'small3D': cls.small3D,
            'standard3D': cls.standard3D,
        }
        if preset not in presets:
            raise ValueError(f'Unknown preset: {preset}')
        return presets[preset]()
