# -- Visualization Subpackage -- #

'''
Plotly-based diagnostic plots for the neighbor search grid.
'''

from particleEngineering.MpsSim.visualization.neighborPlots import plotNeighborCountHistogram, plotNeighborhood
