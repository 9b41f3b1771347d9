# -- Particle Cloud Scenario -- #

'''
Builds the particle set described by a GridConfig.

'random' scatters nParticles uniformly in a square/cube of edge
domainSize and flags a fraction of them as ghosts. 'lattice' fills
the same domain with a regular arrangement at particleSpacing, the
initial layout of an MPS fluid column.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

from particleEngineering.MpsSim.neighbors.protocols import GridConfig
from particleEngineering.MpsSim.particles.particleSet import ParticleSet


def createParticleCloud(config: GridConfig) -> ParticleSet:
    '''
    Create the particle set for a run configuration.

    Parameters:
    -----------
    config : GridConfig
        Run configuration

    Returns:
    --------
    ParticleSet : Generated particles

    Raises:
    -------
    ValueError : If the layout is unknown
    '''
    if config.layout == 'random':
        return ParticleSet.createRandom(
            nParticles=config.nParticles,
            domainSize=config.domainSize,
            dimension=config.dimension,
            ghostFraction=config.ghostFraction,
            seed=config.seed,
        )
    elif config.layout == 'lattice':
        return ParticleSet.createLattice(
            domainSize=config.domainSize,
            spacing=config.particleSpacing,
            dimension=config.dimension,
        )
    else:
        raise ValueError(f'Unknown particle layout: {config.layout}')
