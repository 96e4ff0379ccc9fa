'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

import os

from repseqPy.RepRepReporting.repRepPlots import writeTable, plotStackedBars
from repseqPy.logger import printto


def generateAnnotationReport(annotations, antigens, hla, fraction, name, outDir, stream=None):
    printto(stream, "Annotation tables are being written out ... ")
    writeTable(annotations, os.path.join(outDir, name + "_vdjdb_matches.csv"), index=False, stream=stream)
    writeTable(antigens, os.path.join(outDir, name + "_antigen_species.csv"), index=False, stream=stream)
    writeTable(hla, os.path.join(outDir, name + "_hla.csv"), index=False, stream=stream)
    writeTable(fraction.to_frame(), os.path.join(outDir, name + "_annotated_fraction.csv"), stream=stream)

    for table, field, title in ((antigens, 'antigenSpecies', 'Antigen species'), (hla, 'hla', 'HLA allele group')):
        if len(table):
            composition = table.pivot(index='sample', columns=field, values='freq')
            plotStackedBars(composition, os.path.join(outDir, "{}_{}.png".format(name, field)),
                            title=title + ' of annotated clonotypes', ylabel='Frequency', stream=stream)
