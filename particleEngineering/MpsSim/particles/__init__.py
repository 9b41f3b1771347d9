# -- Particles Package -- #

'''
Particle container feeding coordinates and validity to the grid.
'''

from particleEngineering.MpsSim.particles.particleSet import ParticleSet, ParticleType
