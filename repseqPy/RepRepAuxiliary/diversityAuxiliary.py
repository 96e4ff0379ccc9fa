'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''
from __future__ import division

import numpy as np

from pandas import DataFrame, unique

from repseqPy.RepRepAuxiliary.loaderAuxiliary import UnknownSampleError
from repseqPy.logger import printto, LEVEL


DIVERSITY_COLUMNS = ['observed', 'chao1', 'shannon', 'singletons', 'doubletons', 'reads', 'undefined']


class DivisionEdgeCase(Exception):
    """
    a diversity index has a zero denominator for this sample (Chao1 without doubletons,
    normalized Shannon entropy of a single clonotype)
    """
    def __init__(self, sampleId, index, reason):
        super(DivisionEdgeCase, self).__init__("{} is undefined for sample {}: {}".format(index, sampleId, reason))
        self.sampleId = sampleId
        self.index = index
        self.reason = reason


def estimateChao1(counts, sampleId=None, strict=False):
    """
    Chao1 richness estimator D_obs + c1^2 / (2 * c2), c1 and c2 being the number of
    clonotypes seen once and twice respectively.

    :param counts: array-like of clonotype read counts of one sample
    :param sampleId: used in messages only
    :param strict: raise DivisionEdgeCase instead of returning NaN when there are no doubletons
    :return: float, NaN if undefined

    >>> estimateChao1([1, 1, 2, 3])
    6.0
    >>> bool(np.isnan(estimateChao1([1, 3, 5])))
    True
    """
    counts = np.asarray(counts)
    c1 = int((counts == 1).sum())
    c2 = int((counts == 2).sum())
    if c2 == 0:
        if strict:
            raise DivisionEdgeCase(sampleId, 'chao1', "no clonotype was observed exactly twice")
        return np.nan
    return len(counts) + c1 ** 2 / (2.0 * c2)


def estimateShannon(freqs, sampleId=None, strict=False):
    """
    Shannon entropy normalized by the log of the observed diversity, -sum(f * ln f) / ln(D_obs).
    Clonotypes with a zero frequency add nothing to the entropy but still count towards D_obs.

    :param freqs: array-like of clonotype frequencies of one sample
    :param sampleId: used in messages only
    :param strict: raise DivisionEdgeCase instead of returning NaN when D_obs is 1
    :return: float within [0, 1], NaN if undefined

    >>> estimateShannon([0.25, 0.25, 0.25, 0.25])
    1.0
    """
    freqs = np.asarray(freqs, dtype=float)
    observed = len(freqs)
    if observed <= 1:
        if strict:
            raise DivisionEdgeCase(sampleId, 'shannon', "a single clonotype was observed")
        return np.nan
    nonZero = freqs[freqs > 0]
    entropy = -np.sum(nonZero * np.log(nonZero))
    return float(entropy / np.log(observed))


def estimateDiversity(sampleRecords, sampleId, strict=False, stream=None):
    """
    :param sampleRecords: clonotype records of a single sample
    :param sampleId: string
    :param strict: bool, see estimateChao1 / estimateShannon
    :param stream: logging stream
    :return: dict with the DIVERSITY_COLUMNS keys
    """
    counts = sampleRecords['count'].values
    undefined = []

    chao1 = estimateChao1(counts, sampleId=sampleId, strict=strict)
    if np.isnan(chao1):
        undefined.append('chao1')
    shannon = estimateShannon(sampleRecords['freq'].values, sampleId=sampleId, strict=strict)
    if np.isnan(shannon):
        undefined.append('shannon')

    if undefined:
        printto(stream, "\t{}: {} undefined for this sample and reported as null"
                .format(sampleId, ' and '.join(undefined)), LEVEL.WARN)

    return {
        'observed': len(counts),
        'chao1': chao1,
        'shannon': shannon,
        'singletons': int((counts == 1).sum()),
        'doubletons': int((counts == 2).sum()),
        'reads': int(counts.sum()),
        'undefined': ','.join(undefined)
    }


def calcDiversity(records, samples=None, strict=False, stream=None):
    """
    observed diversity, Chao1 and normalized Shannon entropy of every sample

    :param records: clonotype record table
    :param samples: sample order, defaults to the order of appearance in records
    :param strict: bool
                if set, an undefined index raises DivisionEdgeCase. Otherwise it is reported as NaN and
                named in the 'undefined' column
    :param stream: logging stream
    :return: DataFrame indexed by sample with DIVERSITY_COLUMNS columns
    """
    printto(stream, "The diversity of each sample is being estimated ... ")
    samples = list(unique(records['sample'])) if samples is None else list(samples)
    grouped = dict(list(records.groupby('sample', sort=False)))
    rows = []
    for sampleId in samples:
        if sampleId not in grouped:
            raise UnknownSampleError(sampleId)
        rows.append(estimateDiversity(grouped[sampleId], sampleId, strict=strict, stream=stream))
    diversity = DataFrame(rows, index=samples, columns=DIVERSITY_COLUMNS)
    diversity.index.name = 'sample'
    return diversity


def annotateSpectratypes(records):
    """
    spectratype, that is, histogram of clonotype counts by CDR3 amino acid length.
    The spectratype is useful to detect highly clonal repertoires, as the spectratype of
    non-expanded T-cells has a symmetric gaussian-like distribution.

    :param records: clonotype record table
    :return: DataFrame with columns 'sample', 'length', 'clonotypes' (number of clonotypes)
             and 'freq' (read-weighted frequency)
    """
    lengths = records.assign(length=records['cdr3aa'].str.len())
    spectratypes = lengths.groupby(['sample', 'length'], sort=False).agg(
        clonotypes=('cdr3aa', 'size'),
        freq=('freq', 'sum')
    ).reset_index()
    return spectratypes.sort_values(['sample', 'length'], kind='mergesort').reset_index(drop=True)


def topClonotypes(records, top=100):
    """
    :param records: clonotype record table
    :param top: number of most abundant clonotypes kept per sample, float('inf') keeps all of them
    :return: DataFrame, the top clonotypes of every sample in descending order of count
    """
    ordered = records.sort_values(['sample', 'count'], ascending=[True, False], kind='mergesort')
    if top == float('inf'):
        return ordered.reset_index(drop=True)
    return ordered.groupby('sample', sort=False).head(int(top)).reset_index(drop=True)
