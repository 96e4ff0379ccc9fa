'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''
import os

from pandas import DataFrame, read_csv, isnull

from repseqPy.config import VDJDB_COLUMNS, DEFAULT_SPECIES, DEFAULT_GENE, DEFAULT_MHC_CLASS, RECORD_COLUMNS
from repseqPy.logger import printto, LEVEL


ANNOTATION_COLUMNS = RECORD_COLUMNS + ['epitope', 'antigenSpecies', 'mhc', 'hla']


def loadReferenceTable(filename, columns=None, stream=None):
    """
    reads a VDJdb-like tab separated table (e.g. vdjdb.slim.txt or vdjdb.txt of a VDJdb release)

    :param filename: string, path to the (optionally gzipped) table
    :param columns: dict, internal name => column name in the table. Defaults to config.VDJDB_COLUMNS
    :param stream: logging stream
    :return: DataFrame with one column per internal name: 'cdr3', 'epitope', 'mhc', 'antigenSpecies',
             'species', 'gene', 'mhcClass'
    """
    columns = VDJDB_COLUMNS if columns is None else columns
    filename = os.path.expandvars(filename)
    reference = read_csv(filename, sep='\t', dtype=str)
    missing = [col for col in columns.values() if col not in reference.columns]
    if missing:
        raise ValueError("Reference table {} is missing required column(s): {}"
                         .format(os.path.basename(filename), ', '.join(missing)))
    reference = DataFrame(dict((name, reference[col]) for name, col in columns.items()),
                          columns=list(columns.keys()))
    reference = reference.dropna(subset=['cdr3'])
    reference['cdr3'] = reference['cdr3'].str.strip()
    printto(stream, "{:,} entries have been loaded from the reference table {}"
            .format(len(reference), os.path.basename(filename)), LEVEL.INFO)
    return reference.reset_index(drop=True)


def extractAlleleGroup(allele):
    """
    reduces an HLA allele to its allele group (first field), which is the resolution most VDJdb
    records share

    >>> extractAlleleGroup("HLA-A*02:01")
    'HLA-A*02'
    >>> extractAlleleGroup("HLA-B*08:01:01")
    'HLA-B*08'
    >>> extractAlleleGroup("HLA-DRB1*15")
    'HLA-DRB1*15'
    >>> extractAlleleGroup(float('nan'))
    ''
    """
    if isnull(allele):
        return ''
    return str(allele).strip().split(':')[0]


def filterReference(reference, species=DEFAULT_SPECIES, gene=DEFAULT_GENE, mhcClass=DEFAULT_MHC_CLASS,
                    stream=None):
    """
    keeps the reference entries of the given organism, receptor gene and MHC class. A predicate set
    to None is not applied. The allele group of 'mhc' is added as the 'hla' column.

    :param reference: output of loadReferenceTable
    :param species: string, e.g. HomoSapiens
    :param gene: string, e.g. TRB
    :param mhcClass: string, e.g. MHCI
    :param stream: logging stream
    :return: filtered copy of reference
    """
    selected = reference['cdr3'].notnull()
    for field, value in (('species', species), ('gene', gene), ('mhcClass', mhcClass)):
        if value is not None:
            selected &= (reference[field] == value)
    filtered = reference[selected].copy()
    filtered['hla'] = filtered['mhc'].map(extractAlleleGroup)
    printto(stream, "{:,} of {:,} reference entries are kept for species={}, gene={}, MHC class={}"
            .format(len(filtered), len(reference), species, gene, mhcClass), LEVEL.INFO)
    return filtered.reset_index(drop=True)


def annotateClonotypes(records, reference, stream=None):
    """
    joins clonotypes with the reference on exact CDR3 amino acid sequence equality. This is an inner join:
    clonotypes without a match are left out, and a clonotype matching several entries appears once per entry.

    :param records: clonotype record table
    :param reference: output of filterReference
    :param stream: logging stream
    :return: DataFrame with ANNOTATION_COLUMNS columns
    """
    if len(reference) == 0 or len(records) == 0:
        printto(stream, "Nothing to annotate, the reference table or clonotype set is empty", LEVEL.WARN)
        return DataFrame(columns=ANNOTATION_COLUMNS)

    if 'hla' not in reference.columns:
        reference = reference.assign(hla=reference['mhc'].map(extractAlleleGroup))
    matches = records[RECORD_COLUMNS].merge(reference[['cdr3', 'epitope', 'antigenSpecies', 'mhc', 'hla']],
                                            how='inner', left_on='cdr3aa', right_on='cdr3')
    matches = matches[ANNOTATION_COLUMNS].reset_index(drop=True)
    printto(stream, "{:,} clonotypes matched {:,} reference entries"
            .format(len(matches.drop_duplicates(subset=['sample', 'v', 'cdr3aa'])), len(matches)), LEVEL.INFO)
    return matches


def _aggregateBy(annotations, field):
    # a clonotype matching several entries of the same group is counted once for that group and
    # its frequency is shared evenly between the distinct groups it matches, sample totals stay <= 1
    if len(annotations) == 0:
        return DataFrame(columns=['sample', field, 'freq', 'clonotypes'])
    unique = annotations.drop_duplicates(subset=['sample', 'v', 'cdr3aa', field])
    groups = unique.groupby(['sample', 'v', 'cdr3aa'], sort=False)[field].transform('nunique')
    unique = unique.assign(freq=unique['freq'] / groups.clip(lower=1))
    grouped = unique.groupby(['sample', field], sort=True).agg(
        freq=('freq', 'sum'),
        clonotypes=('cdr3aa', 'size')
    ).reset_index()
    return grouped


def aggregateByAntigen(annotations):
    """
    a clonotype matching n antigen species adds freq / n to each of them

    :param annotations: output of annotateClonotypes
    :return: DataFrame with columns 'sample', 'antigenSpecies', 'freq', 'clonotypes'
    """
    return _aggregateBy(annotations, 'antigenSpecies')


def aggregateByHLA(annotations):
    """
    a clonotype matching n allele groups adds freq / n to each of them

    :param annotations: output of annotateClonotypes
    :return: DataFrame with columns 'sample', 'hla', 'freq', 'clonotypes'
    """
    return _aggregateBy(annotations, 'hla')


def annotatedFraction(annotations, samples=None):
    """
    :param annotations: output of annotateClonotypes
    :param samples: samples to report, samples without any match get 0
    :return: Series, sample => frequency mass of clonotypes with at least one match (each clonotype counted once)
    """
    unique = annotations.drop_duplicates(subset=['sample', 'v', 'cdr3aa'])
    fraction = unique.groupby('sample')['freq'].sum()
    if samples is not None:
        fraction = fraction.reindex(list(samples), fill_value=0.0)
    fraction.name = 'freq'
    return fraction
