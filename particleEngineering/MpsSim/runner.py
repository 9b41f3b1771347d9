# -- Neighbor Search Runner -- #

'''
Command-line entry point for building and checking the MPS grid.

Generates a particle cloud, builds the uniform grid, queries every
valid particle, optionally validates the result against a KD-tree
reference search, and exports a JSON report.

Usage:
    mps-grid                                     # Small 2D random cloud
    mps-grid --preset standard3D                 # 3D lattice
    mps-grid --config configs/grid_2d_default.json
    mps-grid --workers 4 --no-validate
    python -m particleEngineering.MpsSim --plot

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import argparse
import os
import time as timeModule

from particleEngineering.MpsSim.export.reportExporter import ReportExporter
from particleEngineering.MpsSim.neighbors.bruteForce import compareNeighborLists, kdTreeNeighbors
from particleEngineering.MpsSim.neighbors.grid import Grid
from particleEngineering.MpsSim.neighbors.neighborLists import buildNeighborLists, neighborCounts
from particleEngineering.MpsSim.neighbors.protocols import GridConfig
from particleEngineering.MpsSim.scenarios.particleCloud import createParticleCloud


#--------------------------------------------------------------------#
# -- CLI Argument Parser -- #
#--------------------------------------------------------------------#

def buildParser() -> argparse.ArgumentParser:
    '''Build the CLI argument parser.'''
    parser = argparse.ArgumentParser(
        description='MpsSim -- uniform grid neighbor search',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--config', type=str, default=None,
        help='Path to JSON configuration file',
    )
    parser.add_argument(
        '--preset', type=str, default='small',
        choices=['small', 'standard', 'small3D', 'standard3D'],
        help='Configuration preset (default: small)',
    )
    parser.add_argument(
        '--workers', type=int, default=None,
        help='Worker processes for the query loop (overrides config)',
    )
    parser.add_argument(
        '--no-validate', action='store_true',
        help='Skip the reference search comparison',
    )
    parser.add_argument(
        '--no-export', action='store_true',
        help='Skip report export',
    )
    parser.add_argument(
        '--output-dir', type=str, default='output',
        help='Output directory for reports and plots (default: output)',
    )
    parser.add_argument(
        '--plot', action='store_true',
        help='Write neighbor diagnostic plots as HTML',
    )

    return parser


#--------------------------------------------------------------------#
# -- Runner Class -- #
#--------------------------------------------------------------------#

class GridRunner:
    '''
    Builds a grid from a configuration and reports on it.

    Handles the full pipeline: particle generation, grid construction,
    the query loop with progress reporting, validation, and export.
    '''

    def __init__(self) -> None:
        self._exporter: ReportExporter = ReportExporter()

    @property
    def exporter(self) -> ReportExporter:
        return self._exporter

    def run(
        self,
        config: GridConfig,
        doExport: bool = True,
        exportDir: str = 'output',
        doPlot: bool = False,
        showProgress: bool = True,
    ) -> dict:
        '''
        Run one build-and-query pass.

        Parameters:
        -----------
        config : GridConfig
            Run configuration
        doExport : bool
            Whether to write the JSON report
        exportDir : str
            Output directory for report and plots
        doPlot : bool
            Whether to write HTML diagnostic plots
        showProgress : bool
            Display a progress bar during the query loop

        Returns:
        --------
        dict : Run summary
        '''
        print()
        print('=' * 62)
        print('  MPSSIM -- UNIFORM GRID NEIGHBOR SEARCH')
        print('=' * 62)
        print()

        #--------------------------------------------------------------------#
        # Particle Setup
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  PARTICLE SETUP')
        print('-' * 62)

        particles = createParticleCloud(config)
        validMask = particles.validMask

        print(f'  Layout:            {config.layout:>8s}')
        print(f'  Dimension:         {config.dimension:8d}D')
        print(f'  Domain Size:       {config.domainSize:8.3f} m')
        print(f'  Grid Width:        {config.gridWidth:8.4f} m')
        print(f'  Total Particles:   {particles.nParticles:8d}')
        print(f'  Ghost Particles:   {particles.nGhost:8d}')
        print()

        #--------------------------------------------------------------------#
        # Grid Construction
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  BUILDING GRID')
        print('-' * 62)

        buildStart = timeModule.perf_counter()
        grid = Grid.fromProvider(config.gridWidth, particles, config.dimension)
        buildSeconds = timeModule.perf_counter() - buildStart

        nx, ny, nz = grid.gridNumber
        print(f'  Cells (x, y, z):   {nx:6d} {ny:6d} {nz:6d}')
        print(f'  Occupied Cells:    {grid.nOccupiedCells:8d}')
        print(f'  Hashed Particles:  {grid.nValid:8d}')
        print(f'  Build Time:        {buildSeconds * 1000:8.2f} ms')
        print()

        #--------------------------------------------------------------------#
        # Query Loop
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  QUERYING NEIGHBORS')
        print('-' * 62)

        queryStart = timeModule.perf_counter()
        lists = buildNeighborLists(
            grid, validMask, workers=config.workers, showProgress=showProgress,
        )
        querySeconds = timeModule.perf_counter() - queryStart

        counts = neighborCounts(lists)[validMask]
        meanCount = float(counts.mean()) if counts.shape[0] > 0 else 0.0
        maxCount = int(counts.max()) if counts.shape[0] > 0 else 0

        print(f'  Workers:           {config.workers:8d}')
        print(f'  Query Time:        {querySeconds:8.3f} s')
        print(f'  Mean Neighbors:    {meanCount:8.2f}')
        print(f'  Max Neighbors:     {maxCount:8d}')
        print()

        #--------------------------------------------------------------------#
        # Validation
        #--------------------------------------------------------------------#
        mismatches = None
        if config.validate:
            print('-' * 62)
            print('  VALIDATING AGAINST KD-TREE')
            print('-' * 62)

            reference = kdTreeNeighbors(
                particles.coordinates, validMask, config.gridWidth, config.dimension,
            )
            mismatches = compareNeighborLists(lists, reference)
            status = 'PASSED' if mismatches == 0 else 'FAILED'

            print(f'  Mismatched Lists:  {mismatches:8d}')
            print(f'  Status:            {status:>8s}')
            print()

        self._exporter.addRun(grid, counts, buildSeconds, querySeconds, mismatches)

        #--------------------------------------------------------------------#
        # Export
        #--------------------------------------------------------------------#
        exportPath = None
        if doExport:
            print('-' * 62)
            print('  EXPORTING REPORT')
            print('-' * 62)

            exportPath = self._exporter.export(
                config=config,
                outputDir=exportDir,
                scenarioName=f'{config.layout}{config.dimension}D',
            )
            print(f'  Exported to: {exportPath}')
            print()

        plotPaths: list[str] = []
        if doPlot and grid.nValid > 0:
            plotPaths = self._writePlots(grid, particles.coordinates, validMask, counts, exportDir)
            for path in plotPaths:
                print(f'  Plot written: {path}')
            print()

        #--------------------------------------------------------------------#
        # Summary
        #--------------------------------------------------------------------#
        print('=' * 62)
        print('  RUN SUMMARY')
        print('=' * 62)
        print(f'  Particles / s:     {grid.nValid / max(querySeconds, 1e-12):10.0f}')
        print(f'  Build + Query:     {buildSeconds + querySeconds:10.3f} s')
        if mismatches is not None:
            print(f'  Validation:        {"PASSED" if mismatches == 0 else "FAILED":>10s}')
        print('=' * 62)
        print()

        return {
            'grid': grid,
            'neighborLists': lists,
            'buildSeconds': buildSeconds,
            'querySeconds': querySeconds,
            'mismatches': mismatches,
            'exportPath': exportPath,
            'plotPaths': plotPaths,
        }

    def _writePlots(self, grid, coordinates, validMask, counts, outputDir: str) -> list[str]:
        '''Write the neighborhood and histogram figures as HTML.'''
        from particleEngineering.MpsSim.visualization.neighborPlots import (
            plotNeighborCountHistogram,
            plotNeighborhood,
        )

        os.makedirs(outputDir, exist_ok=True)

        # Highlight the valid particle closest to the cloud centre
        validIndices = grid.gridHash[:, 1]
        centre = 0.5 * (grid.lowerBounds + grid.higherBounds)
        offsets = coordinates[validIndices] - centre
        source = int(validIndices[(offsets * offsets).sum(axis=1).argmin()])

        neighborhoodPath = os.path.join(outputDir, 'neighborhood.html')
        plotNeighborhood(grid, coordinates, validMask, source).write_html(neighborhoodPath)

        histogramPath = os.path.join(outputDir, 'neighborCounts.html')
        plotNeighborCountHistogram(counts).write_html(histogramPath)

        return [neighborhoodPath, histogramPath]


#--------------------------------------------------------------------#
# -- CLI Entry Point -- #
#--------------------------------------------------------------------#

def main(argv: list[str] | None = None) -> None:
    '''CLI entry point.'''
    parser = buildParser()
    args = parser.parse_args(argv)

    if args.config:
        config = GridConfig.fromJson(args.config)
    else:
        config = GridConfig.fromPreset(args.preset)

    if args.workers is not None:
        config.workers = args.workers
    if args.no_validate:
        config.validate = False

    runner = GridRunner()
    runner.run(
        config,
        doExport=not args.no_export,
        exportDir=args.output_dir,
        doPlot=args.plot,
    )


if __name__ == '__main__':
    main()
