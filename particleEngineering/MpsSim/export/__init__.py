# -- Export Package -- #

'''
JSON report export for neighbor search runs.
'''

from particleEngineering.MpsSim.export.reportExporter import ReportExporter
