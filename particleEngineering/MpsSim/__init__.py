# -- MpsSim Package -- #

'''
Neighbor search for Moving-Particle Semi-implicit (MPS) simulations.

A uniform grid with cell width equal to the influence radius answers
fixed-radius neighbor queries for 2D and 3D particle sets, skipping
ghost particles.

Sean Bowman [02/12/2026]
'''

__version__ = '0.1.0'

from particleEngineering.MpsSim.neighbors.grid import Grid
from particleEngineering.MpsSim.neighbors.protocols import GridConfig, GridConstructionError, GridIndexError
from particleEngineering.MpsSim.particles.particleSet import ParticleSet, ParticleType
