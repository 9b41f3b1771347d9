# -- Particle Engineering Package -- #

'''
Master package for the particle-method toolkit.

Domain-specific sub-packages:
    - MpsSim: Moving-Particle Semi-implicit tooling, starting with
      the uniform-grid neighbor search

Sean Bowman [02/12/2026]
'''
