'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''
import os

import numpy as np

from pandas import DataFrame, read_csv, to_numeric, concat
from pandas.errors import EmptyDataError, ParserError

from repseqPy.config import DEFAULT_COLUMNS, RECORD_COLUMNS, CLONOTYPE_KEY
from repseqPy.RepRepertoire.repRepUtils import detectSeparator, compressSegmentAllele
from repseqPy.logger import printto, LEVEL


class MissingSampleError(Exception):
    """
    a named sample has no backing data: no table was given, the table cannot be read or it is empty
    """
    def __init__(self, sampleId, reason):
        super(MissingSampleError, self).__init__("Sample {}: {}".format(sampleId, reason))
        self.sampleId = sampleId
        self.reason = reason


class UnknownSampleError(KeyError):
    """
    a sample identifier was referenced by an analysis but is not part of the loaded repertoire
    """
    def __init__(self, sampleId):
        super(UnknownSampleError, self).__init__(sampleId)
        self.sampleId = sampleId

    def __str__(self):
        return "Unknown sample {}".format(self.sampleId)


class MalformedRowError(Exception):
    """
    a row of a sample table fails required-field or type validation
    """
    def __init__(self, sampleId, row, reason):
        where = "" if row is None else " (row {})".format(row)
        super(MalformedRowError, self).__init__("Sample {}{}: {}".format(sampleId, where, reason))
        self.sampleId = sampleId
        self.row = row
        self.reason = reason


def loadSamples(sampleIds, sources, columns=None, segmentLevel=False, stream=None):
    """
    loads every sample in sampleIds into one clonotype record table

    :param sampleIds: list of strings
                the explicit list of samples to analyse. The order is kept in the output
    :param sources: dict
                sample id => path to its clonotype table, or a DataFrame holding the table itself
    :param columns: dict
                internal column name ('count', 'cdr3aa', 'v') => column name in the tables.
                Defaults to config.DEFAULT_COLUMNS (VDJtools format)
    :param segmentLevel: bool
                if set, segment alleles are dropped (TRBV12-3*01 => TRBV12-3) before clonotypes are aggregated
    :param stream: logging stream
    :return: DataFrame with columns 'sample', 'v', 'cdr3aa', 'count', 'freq'. Within a sample,
                (v, cdr3aa) is unique and freq sums up to 1
    """
    seen = set()
    for sampleId in sampleIds:
        if sampleId in seen:
            raise ValueError("Sample {} was listed more than once".format(sampleId))
        seen.add(sampleId)

    tables = []
    for sampleId in sampleIds:
        if sampleId not in sources:
            raise MissingSampleError(sampleId, "no clonotype table was provided")
        tables.append(loadSample(sampleId, sources[sampleId], columns=columns,
                                 segmentLevel=segmentLevel, stream=stream))

    if not tables:
        return DataFrame(columns=RECORD_COLUMNS)

    records = concat(tables, ignore_index=True)
    printto(stream, "{:,} clonotypes have been loaded from {} samples".format(len(records), len(tables)),
            LEVEL.INFO)
    return records


def loadSample(sampleId, source, columns=None, segmentLevel=False, stream=None):
    """
    reads and validates a single clonotype table. Identical clonotypes (same segment and CDR3 amino acid
    sequence) are merged into one record whose count is the sum of the merged counts.

    :param sampleId: string
    :param source: string (path to a csv/tsv file, optionally gzipped) or DataFrame
    :param columns: dict, see loadSamples
    :param segmentLevel: bool, see loadSamples
    :param stream: logging stream
    :return: DataFrame with columns 'sample', 'v', 'cdr3aa', 'count', 'freq'
    """
    columns = DEFAULT_COLUMNS if columns is None else columns
    table = _readTable(sampleId, source, stream=stream)

    missing = [columns[c] for c in ('v', 'cdr3aa', 'count') if columns[c] not in table.columns]
    if missing:
        raise MalformedRowError(sampleId, None, "missing required column(s) {}".format(', '.join(missing)))

    if len(table) == 0:
        raise MissingSampleError(sampleId, "clonotype table is empty")

    table = DataFrame({
        'v': table[columns['v']],
        'cdr3aa': table[columns['cdr3aa']],
        'count': table[columns['count']]
    })

    for field in ('v', 'cdr3aa'):
        values = table[field].astype(str).str.strip()
        bad = table[field].isnull() | (values == '')
        if bad.any():
            raise MalformedRowError(sampleId, _firstRow(bad), "{} is missing".format(field))
        table[field] = values

    counts = to_numeric(table['count'], errors='coerce')
    if counts.isnull().any():
        row = _firstRow(counts.isnull())
        raise MalformedRowError(sampleId, row, "count {!r} is missing or not a number"
                                .format(table['count'].iloc[row]))
    if (~np.isfinite(counts)).any():
        row = _firstRow(~np.isfinite(counts))
        raise MalformedRowError(sampleId, row, "count {} is not a finite number".format(counts.iloc[row]))
    if (counts < 0).any():
        row = _firstRow(counts < 0)
        raise MalformedRowError(sampleId, row, "count {} is negative".format(counts.iloc[row]))
    if (counts != counts.round()).any():
        row = _firstRow(counts != counts.round())
        raise MalformedRowError(sampleId, row, "count {} is not an integer".format(counts.iloc[row]))
    table['count'] = counts.astype('int64')

    if segmentLevel:
        table['v'] = table['v'].map(compressSegmentAllele)

    before = len(table)
    table = table.groupby(CLONOTYPE_KEY, sort=False, as_index=False)['count'].sum()
    if len(table) < before:
        printto(stream, "\t{}: {:,} duplicated clonotype rows were merged".format(sampleId, before - len(table)),
                LEVEL.WARN)

    total = table['count'].sum()
    if total == 0:
        raise MissingSampleError(sampleId, "clonotype table holds no reads")

    table.insert(0, 'sample', sampleId)
    table['freq'] = table['count'] / float(total)
    printto(stream, "\t{}: {:,} clonotypes, {:,} reads".format(sampleId, len(table), int(total)))
    return table[RECORD_COLUMNS]


def normalizeFrequencies(records):
    """
    recomputes freq as count over the sample's total count, returns a new DataFrame
    :param records: clonotype record table
    :return: copy of records with an updated freq column
    """
    records = records.copy()
    totals = records.groupby('sample')['count'].transform('sum')
    records['freq'] = records['count'] / totals.astype(float)
    return records


def _readTable(sampleId, source, stream=None):
    if source is None:
        raise MissingSampleError(sampleId, "no clonotype table was provided")
    if isinstance(source, DataFrame):
        return source.copy()

    source = os.path.expandvars(str(source))
    if not os.path.isfile(source):
        raise MissingSampleError(sampleId, "{} does not exist".format(source))

    printto(stream, "Loading {} from {} ...".format(sampleId, os.path.basename(source)))
    try:
        return read_csv(source, sep=detectSeparator(source), dtype=str)
    except EmptyDataError:
        raise MissingSampleError(sampleId, "{} is empty".format(source))
    except (ParserError, UnicodeDecodeError, OSError) as e:
        raise MissingSampleError(sampleId, "{} cannot be read: {}".format(source, e))


def _firstRow(mask):
    # positional index of the first offending row
    return int(mask.values.argmax())
