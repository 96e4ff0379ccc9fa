import pytest

from pandas import DataFrame

from repseqPy.RepRepAuxiliary.loaderAuxiliary import *
from repseqPy.RepRepertoire.RepRepertoire import RepRepertoire


def test_loadSamples_frequencies(twoSampleTables):
    records = loadSamples(['s1', 's2'], twoSampleTables)

    assert list(records.columns) == ['sample', 'v', 'cdr3aa', 'count', 'freq']
    assert len(records) == 4
    # frequencies sum up to 1 within each sample
    for total in records.groupby('sample')['freq'].sum():
        assert total == pytest.approx(1.0)
    s1 = records[records['sample'] == 's1'].set_index('cdr3aa')['freq']
    assert s1['CASSX'] == pytest.approx(2 / 3.0)
    assert s1['CASSY'] == pytest.approx(1 / 3.0)


def test_loadSamples_keepsSampleOrder(twoSampleTables):
    records = loadSamples(['s2', 's1'], twoSampleTables)
    assert list(records['sample'].unique()) == ['s2', 's1']


def test_loadSamples_fromFiles(twoSampleTables, writeTables):
    paths = writeTables(twoSampleTables)
    records = loadSamples(['s1', 's2'], dict(zip(['s1', 's2'], paths)))
    assert len(records) == 4
    assert records['count'].sum() == 25

    # comma separated and gzipped tables are read as well
    paths = writeTables(twoSampleTables, ext='.csv.gz')
    gzRecords = loadSamples(['s1', 's2'], dict(zip(['s1', 's2'], paths)))
    assert gzRecords.equals(records)


def test_loadSample_mergesDuplicates():
    table = DataFrame({'count': [3, 2, 1], 'cdr3aa': ['CASSX', 'CASSX', 'CASSY'], 'v': ['TRBV1', 'TRBV1', 'TRBV1']})
    records = loadSample('s', table)
    assert len(records) == 2
    assert records.set_index('cdr3aa').loc['CASSX', 'count'] == 5
    assert records['freq'].sum() == pytest.approx(1.0)


def test_loadSample_segmentLevel():
    table = DataFrame({'count': [3, 2], 'cdr3aa': ['CASSX', 'CASSX'], 'v': ['TRBV12-3*01', 'TRBV12-3*02']})
    assert len(loadSample('s', table)) == 2
    records = loadSample('s', table, segmentLevel=True)
    assert len(records) == 1
    assert records['v'].iloc[0] == 'TRBV12-3'
    assert records['count'].iloc[0] == 5


def test_loadSample_customColumns():
    table = DataFrame({'cloneCount': [3, 2], 'aaSeqCDR3': ['CASSX', 'CASSY'], 'allVHitsWithScore': ['V1', 'V2']})
    records = loadSample('s', table, columns={'count': 'cloneCount', 'cdr3aa': 'aaSeqCDR3', 'v': 'allVHitsWithScore'})
    assert list(records['cdr3aa']) == ['CASSX', 'CASSY']


def test_loadSample_zeroCountKept():
    table = DataFrame({'count': [4, 0], 'cdr3aa': ['CASSX', 'CASSY'], 'v': ['TRBV1', 'TRBV1']})
    records = loadSample('s', table)
    assert len(records) == 2
    assert records.set_index('cdr3aa').loc['CASSY', 'freq'] == 0


def test_missingSample(twoSampleTables, tmpdir):
    with pytest.raises(MissingSampleError):
        loadSamples(['s1', 's3'], twoSampleTables)

    with pytest.raises(MissingSampleError):
        loadSample('s', str(tmpdir.join("absent.txt")))

    empty = str(tmpdir.join("empty.txt"))
    open(empty, 'w').close()
    with pytest.raises(MissingSampleError):
        loadSample('s', empty)

    # header only
    with pytest.raises(MissingSampleError):
        loadSample('s', DataFrame(columns=['count', 'cdr3aa', 'v']))

    # no reads at all
    with pytest.raises(MissingSampleError):
        loadSample('s', DataFrame({'count': [0], 'cdr3aa': ['CASSX'], 'v': ['TRBV1']}))


def test_malformedRows():
    with pytest.raises(MalformedRowError):
        loadSample('s', DataFrame({'count': [1], 'cdr3aa': ['CASSX']}))

    for count in (['-1'], ['abc'], ['2.5'], [None], ['inf'], ['-inf']):
        with pytest.raises(MalformedRowError):
            loadSample('s', DataFrame({'count': count, 'cdr3aa': ['CASSX'], 'v': ['TRBV1']}))

    with pytest.raises(MalformedRowError) as e:
        loadSample('s', DataFrame({'count': [1, 2], 'cdr3aa': ['CASSX', ''], 'v': ['TRBV1', 'TRBV1']}))
    assert e.value.row == 1


def test_duplicatedSampleIds(twoSampleTables):
    with pytest.raises(ValueError):
        loadSamples(['s1', 's1'], twoSampleTables)


def test_normalizeFrequencies(twoSampleTables):
    records = loadSamples(['s1', 's2'], twoSampleTables)
    records['freq'] = 0.0
    normalized = normalizeFrequencies(records)
    assert (records['freq'] == 0).all()
    assert normalized.groupby('sample')['freq'].sum().tolist() == pytest.approx([1.0, 1.0])


def test_repertoire_isReadOnly(twoSampleTables):
    repertoire = RepRepertoire.fromTables(['s1', 's2'], twoSampleTables)
    assert repertoire.samples == ('s1', 's2')
    assert len(repertoire) == 4

    records = repertoire.records
    records['count'] = 0
    assert repertoire.records['count'].sum() == 25
    assert list(repertoire.totals()) == [15, 10]
    assert len(repertoire.sample('s2')) == 2

    with pytest.raises(UnknownSampleError):
        repertoire.sample('s3')
