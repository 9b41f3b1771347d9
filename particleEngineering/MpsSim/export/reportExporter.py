# -- Neighbor Search Report Exporter -- #

'''
Exports neighbor-search benchmark runs as JSON.

Collects one record per grid build (timings, grid shape, neighbor
statistics, validation outcome) and writes them to a single JSON file
alongside the run configuration.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import json
import os
from datetime import datetime

import numpy as np

from particleEngineering.MpsSim.neighbors.grid import Grid
from particleEngineering.MpsSim.neighbors.protocols import GridConfig


class ReportExporter:
    '''
    Collects and exports neighbor-search run data as JSON.

    Usage:
        exporter = ReportExporter()
        exporter.addRun(grid, counts, buildSeconds, querySeconds)
        exporter.export(config, outputDir='output')

    Output JSON format:
    {
        "meta": { "type": "mpsGrid", "dimension": 2, "created": "...", ... },
        "config": { "gridWidth": 0.021, ... },
        "runs": [
            {
                "size": 2000,
                "nValid": 1900,
                "gridNumber": [11, 11, 0],
                "occupiedCells": 121,
                "buildSeconds": 0.002,
                "querySeconds": 0.15,
                "neighborCount": {"min": 0, "max": 14, "mean": 6.1},
                "mismatches": 0
            },
            ...
        ]
    }
    '''

    def __init__(self) -> None:
        self._runs: list[dict] = []

    @property
    def nRuns(self) -> int:
        '''Number of collected runs.'''
        return len(self._runs)

    @property
    def runs(self) -> list[dict]:
        return list(self._runs)

    def addRun(
        self,
        grid: Grid,
        counts: np.ndarray,
        buildSeconds: float,
        querySeconds: float,
        mismatches: int | None = None,
    ) -> dict:
        '''
        Record one grid build and query pass.

        Parameters:
        -----------
        grid : Grid
            Grid that was queried
        counts : np.ndarray
            Neighbor count per valid particle
        buildSeconds : float
            Wall-clock grid construction time [s]
        querySeconds : float
            Wall-clock time of the query loop [s]
        mismatches : int | None
            Particles disagreeing with the reference search,
            None if validation was skipped

        Returns:
        --------
        dict : The stored record
        '''
        counts = np.asarray(counts)
        if counts.shape[0] > 0:
            countStats = {
                'min': int(counts.min()),
                'max': int(counts.max()),
                'mean': round(float(counts.mean()), 4),
            }
        else:
            countStats = {'min': 0, 'max': 0, 'mean': 0.0}

        record = {
            'size': grid.size,
            'nValid': grid.nValid,
            'gridNumber': list(grid.gridNumber),
            'occupiedCells': grid.nOccupiedCells,
            'buildSeconds': round(buildSeconds, 6),
            'querySeconds': round(querySeconds, 6),
            'neighborCount': countStats,
            'mismatches': mismatches,
        }
        self._runs.append(record)
        return record

    def export(
        self,
        config: GridConfig,
        outputDir: str = 'output',
        scenarioName: str = 'neighborSearch',
    ) -> str:
        '''
        Write all collected runs to a JSON file.

        Parameters:
        -----------
        config : GridConfig
            Run configuration for metadata
        outputDir : str
            Output directory path
        scenarioName : str
            Scenario name for the filename

        Returns:
        --------
        str : Path to the exported JSON file
        '''
        os.makedirs(outputDir, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f'mpsGrid_{scenarioName}_{timestamp}.json'
        filepath = os.path.join(outputDir, filename)

        output = {
            'meta': {
                'type': 'mpsGrid',
                'dimension': config.dimension,
                'nRuns': len(self._runs),
                'created': datetime.now().isoformat(),
            },
            'config': {
                'gridWidth': config.gridWidth,
                'layout': config.layout,
                'nParticles': config.nParticles,
                'domainSize': config.domainSize,
                'particleSpacing': config.particleSpacing,
                'ghostFraction': config.ghostFraction,
                'seed': config.seed,
                'workers': config.workers,
            },
            'runs': self._runs,
        }

        with open(filepath, 'w') as f:
            json.dump(output, f, indent=2)

        return filepath
