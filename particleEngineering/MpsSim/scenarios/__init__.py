# -- Scenarios Package -- #

'''
Particle cloud generators for neighbor search runs.
'''

from particleEngineering.MpsSim.scenarios.particleCloud import createParticleCloud
