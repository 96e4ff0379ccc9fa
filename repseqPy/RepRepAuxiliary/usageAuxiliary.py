'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''
from __future__ import division

from pandas import unique
from scipy.cluster.hierarchy import linkage, leaves_list

from repseqPy.config import USAGE_PSEUDOCOUNT, USAGE_PSEUDOTOTAL
from repseqPy.RepRepAuxiliary.loaderAuxiliary import UnknownSampleError
from repseqPy.logger import printto, LEVEL


class EmptyUsageMatrix(Exception):
    """
    no sample was given or no segment is shared by all samples
    """


def segmentUsage(records):
    """
    number of distinct clonotypes using each segment, per sample, with additive smoothing:
    (clonotypes + USAGE_PSEUDOCOUNT) / (clonotypes in sample + USAGE_PSEUDOTOTAL)

    :param records: clonotype record table
    :return: DataFrame with columns 'sample', 'v', 'clonotypes', 'total', 'fraction'
    """
    usage = records.groupby(['sample', 'v'], sort=False).size().rename('clonotypes').reset_index()
    totals = records.groupby('sample', sort=False).size()
    usage['total'] = usage['sample'].map(totals).astype(int)
    usage['fraction'] = (usage['clonotypes'] + USAGE_PSEUDOCOUNT) / (usage['total'] + USAGE_PSEUDOTOTAL)
    return usage


def goodSegments(usage, samples):
    """
    :param usage: output of segmentUsage
    :param samples: collection of sample ids
    :return: sorted list of segments that are used in every one of samples
    """
    samples = set(samples)
    present = usage[usage['sample'].isin(samples)].groupby('v')['sample'].nunique()
    return sorted(present[present == len(samples)].index)


def calcUsageMatrix(records, samples=None, stream=None):
    """
    sample x segment matrix of smoothed usage fractions, restricted to segments found in all samples.
    Segments missing from even one sample are dropped, never imputed.

    :param records: clonotype record table
    :param samples: samples to include, defaults to all samples in records
    :param stream: logging stream
    :return: DataFrame indexed by sample (sorted) with one column per good segment (sorted)
    """
    printto(stream, "V segment usage is being calculated ... ")
    samples = list(unique(records['sample'])) if samples is None else list(samples)
    if not samples:
        raise EmptyUsageMatrix("No samples to build a segment usage matrix from")
    present = set(records['sample'])
    for sampleId in samples:
        if sampleId not in present:
            raise UnknownSampleError(sampleId)

    usage = segmentUsage(records[records['sample'].isin(samples)])
    good = goodSegments(usage, samples)
    allSegments = usage['v'].nunique()
    printto(stream, "\t{} out of {} segments are used in all {} samples"
            .format(len(good), allSegments, len(samples)), LEVEL.INFO)
    if not good:
        raise EmptyUsageMatrix("None of the {} segments is used in all {} samples".format(allSegments, len(samples)))

    usage = usage[usage['v'].isin(good)]
    matrix = usage.pivot(index='sample', columns='v', values='fraction')
    matrix = matrix.reindex(index=sorted(samples), columns=good)
    matrix.columns.name = 'v'
    return matrix


def usageCorrelation(matrix):
    """
    :param matrix: output of calcUsageMatrix
    :return: sample x sample Pearson correlation of segment usage profiles
    """
    return matrix.T.corr(method='pearson')


def clusterSamples(matrix, method='average', metric='euclidean'):
    """
    hierarchical clustering of samples by their segment usage profiles

    :param matrix: output of calcUsageMatrix
    :param method: linkage method, see scipy.cluster.hierarchy.linkage
    :param metric: distance metric, see scipy.spatial.distance.pdist
    :return: 2-tuple: (linkage matrix or None if there are less than 2 samples, list of samples in leaf order)
    """
    samples = list(matrix.index)
    if len(samples) < 2:
        return None, samples
    link = linkage(matrix.values, method=method, metric=metric)
    return link, [samples[i] for i in leaves_list(link)]
