'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

import os

from repseqPy.RepRepertoire.repRepUtils import createIfNot
from repseqPy.RepRepReporting.repRepPlots import plotDist, writeTable
from repseqPy.logger import printto


def generateDiversityReport(diversity, spectraTypes, clonoTypes, name, outDir, topClonotypes=100, stream=None):
    writeTable(diversity, os.path.join(outDir, name + "_diversity.csv"), stream=stream)
    printto(stream, "The diversity indices have been written to " + name + "_diversity.csv")
    generateSpectraTypePlots(spectraTypes, outDir, stream=stream)
    writeClonoTypesToFiles(clonoTypes, outDir, topClonotypes, stream=stream)


def generateSpectraTypePlots(spectraTypes, outDir, stream=None):
    printto(stream, "Spectratypes are being written out ... ")
    specFolder = os.path.join(outDir, "spectratypes")
    createIfNot(specFolder)

    for sampleId, table in spectraTypes.groupby('sample', sort=False):
        filename = os.path.join(specFolder, sampleId + '_cdr3_spectratype.csv')
        plotDist(dict(zip(table['length'], table['clonotypes'])), sampleId, filename,
                 title='CDR3 Length Distribution of ' + sampleId,
                 rotateLabels=False, sortValues=False, top=40, stream=stream)


def writeClonoTypesToFiles(clonoTypes, outDir, topClonotypes=100, stream=None):
    printto(stream, "Clonotype files are being written out ... ")
    cloneFolder = os.path.join(outDir, "clonotypes")
    createIfNot(cloneFolder)

    for sampleId, table in clonoTypes.groupby('sample', sort=False):
        # cap the file name to the number of clonotypes actually written
        if topClonotypes != float('inf') and len(table) < topClonotypes:
            stringTopClonotypes = str(len(table))
        else:
            stringTopClonotypes = 'all' if topClonotypes == float('inf') else str(int(topClonotypes))

        # descending order
        filename = os.path.join(cloneFolder, "{}_clonotypes_{}_over.csv".format(sampleId, stringTopClonotypes))
        writeTable(table[['v', 'cdr3aa', 'count', 'freq']], filename, index=False, stream=stream)
