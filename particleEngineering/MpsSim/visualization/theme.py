# -- Visualization Theme -- #

'''
Centralized dark-mode theme for MpsSim Plotly visualizations.

Sean Bowman [02/12/2026]
'''

# Plotly template
TEMPLATE = 'plotly_dark'

# Primary color palette
BLUE = '#42A5F5'
RED = '#EF5350'
GREEN = '#66BB6A'
ORANGE = '#FFA726'

# Neutrals
REFERENCE_LINE = '#888888'

# Marker roles in neighbor plots
PARTICLE_COLOR = BLUE
SOURCE_COLOR = RED
NEIGHBOR_COLOR = GREEN
CANDIDATE_COLOR = ORANGE
