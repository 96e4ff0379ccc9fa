'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

import os

from pandas import DataFrame

from repseqPy.RepRepReporting.repRepPlots import writeTable, plotHeatmapFromDF, plotVenn
from repseqPy.logger import printto


def generateOverlapReport(matrix, errors, shared, sets, name, outDir, stream=None):
    """
    :param matrix: sample x sample overlap matrix
    :param errors: dict, pair => error message of the pairs that could not be compared
    :param shared: sample x sample number of shared clonotypes
    :param sets: dict, sample => set of clonotypes
    :param name: run name, used as file prefix
    :param outDir: output directory
    :param stream: logging stream
    """
    printto(stream, "Overlap tables are being written out ... ")
    writeTable(matrix, os.path.join(outDir, name + "_overlap.csv"), stream=stream)
    writeTable(shared, os.path.join(outDir, name + "_shared_clonotypes.csv"), stream=stream)
    if errors:
        failed = DataFrame([(a, b, msg) for (a, b), msg in errors.items()], columns=['sampleA', 'sampleB', 'error'])
        writeTable(failed, os.path.join(outDir, name + "_overlap_failed_pairs.csv"), index=False, stream=stream)

    plotHeatmapFromDF(matrix, os.path.join(outDir, name + "_overlap.png"),
                      title='Pairwise overlap (Bhattacharyya coefficient)', label='Similarity', stream=stream)
    if len(sets) in (2, 3):
        plotVenn(sets, os.path.join(outDir, name + "_shared_clonotypes_venn.png"),
                 title='Shared clonotypes', stream=stream)
