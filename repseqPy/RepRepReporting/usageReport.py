'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

import os

from repseqPy.RepRepReporting.repRepPlots import writeTable, plotClusteredHeatmap, plotHeatmapFromDF, \
    plotStackedBars
from repseqPy.logger import printto


def generateUsageReport(usage, matrix, correlation, link, name, outDir, stream=None):
    """
    :param usage: long table of segment usage, see usageAuxiliary.segmentUsage
    :param matrix: sample x segment smoothed usage matrix
    :param correlation: sample x sample correlation of usage profiles
    :param link: linkage matrix of the samples or None
    :param name: run name, used as file prefix
    :param outDir: output directory
    :param stream: logging stream
    """
    printto(stream, "Segment usage tables are being written out ... ")
    writeTable(usage, os.path.join(outDir, name + "_segment_usage.csv"), index=False, stream=stream)
    writeTable(matrix, os.path.join(outDir, name + "_usage_matrix.csv"), stream=stream)
    writeTable(correlation, os.path.join(outDir, name + "_usage_correlation.csv"), stream=stream)

    plotClusteredHeatmap(matrix, link, os.path.join(outDir, name + "_usage_heatmap.png"),
                         title='V segment usage', label='Smoothed fraction', stream=stream)
    plotHeatmapFromDF(correlation, os.path.join(outDir, name + "_usage_correlation.png"),
                      title='Correlation of V segment usage', label='Pearson r', stream=stream)
    plotStackedBars(matrix, os.path.join(outDir, name + "_usage_composition.png"),
                    title='V segment usage', ylabel='Smoothed fraction', top=15, stream=stream)
