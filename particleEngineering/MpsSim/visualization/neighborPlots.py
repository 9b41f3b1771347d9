# -- Neighbor Search Visualizations -- #

'''
Plotly-based diagnostic plots for the neighbor-search grid.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go

from particleEngineering.MpsSim.neighbors.grid import Grid
from particleEngineering.MpsSim.visualization import theme


def plotNeighborhood(
    grid: Grid,
    coordinates: np.ndarray,
    validMask: np.ndarray,
    index: int,
) -> go.Figure:
    '''
    Particle cloud with one particle's cell block and neighbors.

    In 2D the cell boundaries and the influence circle are drawn.
    A 3D grid is shown as a 3D scatter without cell lines.

    Parameters:
    -----------
    grid : Grid
        Grid built from coordinates and validMask
    coordinates : np.ndarray
        Particle positions, shape (N, 3)
    validMask : np.ndarray
        Boolean mask, shape (N,)
    index : int
        Particle to highlight

    Returns:
    --------
    go.Figure : Plotly figure
    '''
    coords = np.asarray(coordinates, dtype=np.float64)
    mask = np.asarray(validMask, dtype=bool)

    candidates = grid.getNeighborsInBox(index)
    neighbors = grid.getNeighbors(index)
    boxOnly = np.setdiff1d(candidates, neighbors)

    groups = [
        ('Particles', np.flatnonzero(mask), theme.PARTICLE_COLOR, 4),
        ('Cell block', boxOnly, theme.CANDIDATE_COLOR, 6),
        ('Neighbors', neighbors, theme.NEIGHBOR_COLOR, 7),
        ('Source', np.array([index]), theme.SOURCE_COLOR, 10),
    ]

    fig = go.Figure()

    if grid.dimension == 3:
        for name, idx, color, size in groups:
            fig.add_trace(go.Scatter3d(
                x=coords[idx, 0], y=coords[idx, 1], z=coords[idx, 2],
                mode='markers', name=name,
                marker=dict(color=color, size=size / 2),
            ))
        fig.update_layout(
            title=f'Neighbors of particle {index} ({len(neighbors)} found)',
            template=theme.TEMPLATE,
            height=600,
        )
        return fig

    for name, idx, color, size in groups:
        fig.add_trace(go.Scatter(
            x=coords[idx, 0], y=coords[idx, 1],
            mode='markers', name=name,
            marker=dict(color=color, size=size),
        ))

    # Cell k spans (lower + (k-1)w, lower + k w]
    w = grid.gridWidth
    lower = grid.lowerBounds
    nx, ny, _ = grid.gridNumber
    xEdges = lower[0] + (np.arange(nx + 1) - 1) * w
    yEdges = lower[1] + (np.arange(ny + 1) - 1) * w
    for x in xEdges:
        fig.add_vline(x=x, line=dict(color=theme.REFERENCE_LINE, width=0.5))
    for y in yEdges:
        fig.add_hline(y=y, line=dict(color=theme.REFERENCE_LINE, width=0.5))

    cx, cy = coords[index, 0], coords[index, 1]
    fig.add_shape(
        type='circle', x0=cx - w, y0=cy - w, x1=cx + w, y1=cy + w,
        line=dict(color=theme.SOURCE_COLOR, dash='dash', width=1),
    )

    fig.update_layout(
        title=f'Neighbors of particle {index} ({len(neighbors)} found)',
        xaxis_title='x (m)',
        yaxis_title='y (m)',
        yaxis=dict(scaleanchor='x', scaleratio=1),
        template=theme.TEMPLATE,
        height=600,
    )

    return fig


def plotNeighborCountHistogram(counts: np.ndarray) -> go.Figure:
    '''
    Histogram of neighbor counts per particle.

    Parameters:
    -----------
    counts : np.ndarray
        Neighbor count per particle

    Returns:
    --------
    go.Figure : Plotly figure
    '''
    counts = np.asarray(counts)

    fig = go.Figure()
    fig.add_trace(go.Histogram(
        x=counts, name='Neighbors',
        marker=dict(color=theme.BLUE),
    ))

    if counts.shape[0] > 0:
        fig.add_vline(
            x=float(counts.mean()),
            line=dict(color=theme.ORANGE, dash='dash', width=1),
            annotation_text=f'mean {counts.mean():.1f}',
        )

    fig.update_layout(
        title='Neighbor Count Distribution',
        xaxis_title='Neighbors per particle',
        yaxis_title='Particles',
        template=theme.TEMPLATE,
        height=350,
    )

    return fig
