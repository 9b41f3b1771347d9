# -- Default Parameters for MPS Neighbor Search -- #

'''
Numerical defaults for the uniform-grid neighbor search and the
particle clouds used to exercise it. Lengths are in metres.

References:
-----------
Koshizuka & Oka (1996) -- Moving-particle semi-implicit method
    for fragmentation of incompressible fluid

Sean Bowman [02/12/2026]
'''

#--------------------------------------------------------------------#
# -- Grid Parameters -- #
#--------------------------------------------------------------------#

# Default particle spacing l0 [m]
defaultParticleSpacing: float = 0.01

# Influence radius to particle spacing ratio
# re = influenceRadiusRatio * l0, typically 2.1 - 4.0 in MPS
influenceRadiusRatio: float = 2.1

# Default grid cell width (= influence radius) [m]
defaultGridWidth: float = influenceRadiusRatio * defaultParticleSpacing

# Default spatial dimension
defaultDimension: int = 2

#--------------------------------------------------------------------#
# -- Particle Cloud Parameters -- #
#--------------------------------------------------------------------#

# Default number of particles in a random cloud
defaultParticleCount: int = 2000

# Default edge length of the cubic/square sampling domain [m]
defaultDomainSize: float = 0.2

# Fraction of particles flagged as ghosts in generated clouds
defaultGhostFraction: float = 0.05

# Seed for reproducible particle clouds
defaultSeed: int = 2017

# Supported particle layouts
particleLayouts: tuple[str, ...] = ('random', 'lattice')

#--------------------------------------------------------------------#
# -- Query Loop -- #
#--------------------------------------------------------------------#

# Worker processes for the per-particle query loop
defaultWorkers: int = 1

# Particles per chunk handed to a worker process
queryChunkSize: int = 2048
