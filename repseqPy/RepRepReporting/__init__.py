'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

__all__ = [
    'annotationReport',
    'diversityReport',
    'overlapReport',
    'repRepPlots',
    'usageReport'
]
