'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''
from __future__ import division

import itertools

import numpy as np

from multiprocessing import Queue
from queue import Empty
from pandas import DataFrame, unique

from repseqPy.config import CLONOTYPE_KEY, SELF_OVERLAP, RESULT_POLL_SECONDS
from repseqPy.RepRepAuxiliary.loaderAuxiliary import UnknownSampleError
from repseqPy.RepRepAuxiliary.OverlapWorker import OverlapWorker
from repseqPy.logger import printto, LEVEL
from repseqPy.utilities import capThreads


def samplePairs(samples):
    """
    :param samples: list of sample ids
    :return: list of all unordered pairs (A, B), A != B, in the order of samples

    >>> samplePairs(['s1', 's2', 's3'])
    [('s1', 's2'), ('s1', 's3'), ('s2', 's3')]
    """
    return list(itertools.combinations(samples, 2))


def splitBySample(records):
    """
    :param records: clonotype record table
    :return: dict, sample => Series of clonotype frequencies indexed by (v, cdr3aa)
    """
    return dict((sampleId, table.set_index(CLONOTYPE_KEY)['freq'])
                for sampleId, table in records.groupby('sample', sort=False))


def bhattacharyya(freqA, freqB):
    """
    Bhattacharyya coefficient sum(sqrt(fA * fB)) over the union of both supports. A clonotype that is
    absent on one side has a frequency of exactly 0 there.

    :param freqA: Series of frequencies indexed by clonotype
    :param freqB: Series of frequencies indexed by clonotype
    :return: float
    """
    freqA, freqB = freqA.align(freqB, join='outer', fill_value=0.0)
    return float(np.sqrt(freqA.values * freqB.values).sum())


def computePairOverlap(bySample, pair):
    """
    :param bySample: output of splitBySample
    :param pair: tuple of 2 sample ids
    :return: float, similarity of the two samples
    """
    for sampleId in pair:
        if sampleId not in bySample:
            raise UnknownSampleError(sampleId)
    return bhattacharyya(bySample[pair[0]], bySample[pair[1]])


def computeOverlaps(bySample, pairs, threads=1, stream=None):
    """
    computes the similarity of every pair. Pairs are independent of each other: they are distributed
    to at most `threads` worker processes and a failing pair does not stop the others.

    :param bySample: output of splitBySample
    :param pairs: list of tuples of 2 sample ids
    :param threads: int, maximum number of worker processes
    :param stream: logging stream
    :return: 2-tuple (dict pair => similarity, dict pair => error message)
    """
    if not pairs:
        return {}, {}

    threads = capThreads(threads, len(pairs), stream=stream)
    printto(stream, "{:,} sample pairs are being compared using {} process(es) ...".format(len(pairs), threads))

    if threads == 1:
        values, errors = {}, {}
        for pair in pairs:
            try:
                values[pair] = computePairOverlap(bySample, pair)
            except Exception as e:
                errors[pair] = str(e)
                printto(stream, "\tPair {} - {} failed: {}".format(pair[0], pair[1], e), LEVEL.ERR)
        return values, errors

    workers = []
    try:
        tasks = Queue()
        exitQueue = Queue()
        resultsQueue = Queue()

        # Initialize workers
        for _ in range(threads):
            w = OverlapWorker(bySample, stream=stream)
            w.tasksQueue = tasks
            w.exitQueue = exitQueue
            w.resultsQueue = resultsQueue
            workers.append(w)
            w.start()

        for pair in pairs:
            tasks.put(pair)

        # poison pills
        for _ in range(threads):
            tasks.put(None)

        values, errors = collectOverlapResults(resultsQueue, pairs, workers=workers, stream=stream)

        # wait for all workers to finish, a worker that died never reports its exit
        i = 0
        while i < threads:
            try:
                if exitQueue.get(timeout=RESULT_POLL_SECONDS):
                    i += 1
            except Empty:
                if not any(w.is_alive() for w in workers):
                    break
        for w in workers:
            w.join()
        return values, errors
    finally:
        for w in workers:
            w.terminate()


def collectOverlapResults(resultsQueue, pairs, workers=(), timeout=RESULT_POLL_SECONDS, stream=None):
    """
    blocks until the results of all pairs have been received. When every worker has exited and the queue
    stays empty, the pairs still outstanding (held by a worker that died) are recorded as failed.

    :param resultsQueue: queue of (pair, similarity, error message) tuples
    :param pairs: list of the pairs submitted
    :param workers: worker processes feeding resultsQueue
    :param timeout: seconds to wait for a result before checking the workers
    :param stream: logging stream
    :return: 2-tuple (dict pair => similarity, dict pair => error message)
    """
    values, errors = {}, {}
    outstanding = list(pairs)
    drained = False
    while outstanding:
        try:
            pair, value, error = resultsQueue.get(timeout=timeout)
        except Empty:
            if any(w.is_alive() for w in workers):
                continue
            # one more poll for results posted right before the last worker exited
            if not drained:
                drained = True
                continue
            for pair in outstanding:
                errors[pair] = "worker process exited before reporting this pair"
                printto(stream, "\tPair {} - {} failed: {}".format(pair[0], pair[1], errors[pair]), LEVEL.ERR)
            break
        if pair in outstanding:
            outstanding.remove(pair)
        if error is None:
            values[pair] = value
        else:
            errors[pair] = error
            printto(stream, "\tPair {} - {} failed: {}".format(pair[0], pair[1], error), LEVEL.ERR)
    return values, errors


def assembleOverlapMatrix(samples, values):
    """
    symmetric sample x sample matrix, (A, B) is mirrored into (B, A) and the diagonal is SELF_OVERLAP.
    Pairs without a value (failed or not requested) are NaN.

    :param samples: list of sample ids
    :param values: dict pair => similarity
    :return: DataFrame
    """
    matrix = DataFrame(np.nan, index=list(samples), columns=list(samples))
    for (a, b), value in values.items():
        matrix.loc[a, b] = value
        matrix.loc[b, a] = value
    for sampleId in samples:
        matrix.loc[sampleId, sampleId] = SELF_OVERLAP
    matrix.index.name = 'sample'
    return matrix


def calcOverlapMatrix(records, samples=None, pairs=None, threads=1, stream=None):
    """
    pairwise Bhattacharyya similarity of samples, clonotypes being matched by segment and CDR3 amino acid sequence

    :param records: clonotype record table
    :param samples: samples of the matrix, defaults to the samples in records
    :param pairs: pairs to compare, defaults to all unordered pairs of samples
    :param threads: maximum number of worker processes
    :param stream: logging stream
    :return: 2-tuple (overlap matrix DataFrame, dict pair => error message of failed pairs)
    """
    printto(stream, "The pairwise overlap of samples is being calculated ... ")
    samples = list(unique(records['sample'])) if samples is None else list(samples)
    pairs = samplePairs(samples) if pairs is None else [tuple(p) for p in pairs]
    values, errors = computeOverlaps(splitBySample(records), pairs, threads=threads, stream=stream)
    matrixSamples = list(samples)
    for pair in pairs:
        for sampleId in pair:
            if sampleId not in matrixSamples and sampleId in records['sample'].values:
                matrixSamples.append(sampleId)
    return assembleOverlapMatrix(matrixSamples, values), errors


def overlapDistance(matrix):
    """
    :param matrix: overlap (similarity) matrix
    :return: 1 - similarity, floored at 0
    """
    return (1.0 - matrix).clip(lower=0.0)


def clonotypeSets(records, samples=None):
    """
    :param records: clonotype record table
    :param samples: samples to include, defaults to all samples in records
    :return: dict, sample => set of (v, cdr3aa) clonotypes
    """
    samples = list(unique(records['sample'])) if samples is None else list(samples)
    sets = {}
    for sampleId in samples:
        table = records[records['sample'] == sampleId]
        sets[sampleId] = set(zip(table['v'], table['cdr3aa']))
    return sets


def sharedClonotypes(records, samples=None):
    """
    :param records: clonotype record table
    :param samples: samples to include, defaults to all samples in records
    :return: sample x sample DataFrame with the number of shared clonotypes
    """
    sets = clonotypeSets(records, samples)
    names = list(sets)
    shared = DataFrame(0, index=names, columns=names)
    for a in names:
        for b in names:
            shared.loc[a, b] = len(sets[a] & sets[b])
    return shared
