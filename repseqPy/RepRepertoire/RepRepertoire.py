'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''
from pandas import unique

from repseqPy.config import RECORD_COLUMNS
from repseqPy.RepRepAuxiliary.loaderAuxiliary import loadSamples, UnknownSampleError


class RepRepertoire:
    """
    read-only collection of clonotype records of a fixed set of samples.

    The record table is built once by the loader and never modified afterwards: every accessor
    hands out a copy, so analyses can freely reshape what they receive.
    """

    def __init__(self, records, samples=None):
        """
        :param records: DataFrame
                    clonotype record table with columns 'sample', 'v', 'cdr3aa', 'count', 'freq'
        :param samples: list of strings
                    sample order. Defaults to the order of first appearance in records
        """
        missing = [c for c in RECORD_COLUMNS if c not in records.columns]
        if missing:
            raise ValueError("Clonotype records are missing column(s): {}".format(', '.join(missing)))
        self._records = records[RECORD_COLUMNS].reset_index(drop=True).copy()
        if samples is None:
            samples = unique(self._records['sample'])
        self._samples = tuple(samples)
        absent = set(self._samples) - set(self._records['sample'])
        if absent:
            raise UnknownSampleError(sorted(absent)[0])

    @classmethod
    def fromTables(cls, sampleIds, sources, columns=None, segmentLevel=False, stream=None):
        """
        loads the clonotype tables of sampleIds, see loaderAuxiliary.loadSamples
        """
        records = loadSamples(sampleIds, sources, columns=columns, segmentLevel=segmentLevel, stream=stream)
        return cls(records, samples=sampleIds)

    @property
    def samples(self):
        return self._samples

    @property
    def records(self):
        return self._records.copy()

    def sample(self, sampleId):
        if sampleId not in self._samples:
            raise UnknownSampleError(sampleId)
        return self._records[self._records['sample'] == sampleId].reset_index(drop=True)

    def totals(self):
        """
        :return: Series, sample => total number of reads, in sample order
        """
        return self._records.groupby('sample')['count'].sum().reindex(list(self._samples))

    def __len__(self):
        return len(self._records)

    def __repr__(self):
        return "RepRepertoire({} samples, {:,} clonotypes)".format(len(self._samples), len(self._records))
