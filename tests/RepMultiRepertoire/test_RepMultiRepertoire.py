import os
import math

import pytest

from pandas import DataFrame

from repseqPy.RepMultiRepertoire.RepMultiRepertoire import RepMultiRepertoire, ComparisonResults
from repseqPy.RepRepAuxiliary.loaderAuxiliary import MissingSampleError, MalformedRowError


def _reference(vdjdbTable, tmpdir):
    path = str(tmpdir.join("vdjdb.slim.txt"))
    vdjdbTable.to_csv(path, sep='\t', index=False)
    return path


def test_allTasks(threeSampleTables, vdjdbTable, writeTables, tmpdir):
    files = writeTables(threeSampleTables)
    outdir = str(tmpdir.join("out"))
    with RepMultiRepertoire(files, task='all', reference=_reference(vdjdbTable, tmpdir), outdir=outdir,
                            name='run') as repertoire:
        results = repertoire.start()

    assert results.samples == ['A', 'B', 'C']
    for component in ComparisonResults.COMPONENTS:
        assert results.succeeded(component)
    # C has no doubletons: reported, not fatal
    assert results.errors == {}
    assert results.diversity.loc['C', 'undefined'] == 'chao1'
    assert list(results.overlap.index) == ['A', 'B', 'C']
    assert results.annotatedFraction['A'] > 0

    for folder, filename in (('diversity', 'run_diversity.csv'),
                             ('usage', 'run_usage_matrix.csv'),
                             ('overlap', 'run_overlap.csv'),
                             ('annotation', 'run_vdjdb_matches.csv'),
                             ('auxiliary', os.path.join('run', 'summary.txt')),
                             ('auxiliary', os.path.join('run', 'run.log')),
                             ('auxiliary', os.path.join('run', 'analysis.params'))):
        assert os.path.exists(os.path.join(outdir, folder, filename)), filename

    with open(os.path.join(outdir, 'auxiliary', 'run', 'summary.txt')) as fp:
        summary = fp.read()
    assert "Samples:3\n" in summary
    assert "Reads:" in summary


def test_failedComponentDoesNotHideOthers(twoSampleTables, threeSampleTables, writeTables, tmpdir):
    # s2 and B share no segment: the usage matrix is empty
    files = writeTables({'s2': twoSampleTables['s2'], 'B': threeSampleTables['B']})
    with RepMultiRepertoire(files, task='all', outdir=str(tmpdir.join("out")), name='partial') as repertoire:
        results = repertoire.start()

    assert not results.succeeded(ComparisonResults.USAGE)
    assert len(results.errors[ComparisonResults.USAGE]) == 1
    assert results.succeeded(ComparisonResults.DIVERSITY)
    assert results.succeeded(ComparisonResults.OVERLAP)
    assert results.overlap.loc['s2', 'B'] == 0.0
    # no reference: annotation skipped
    assert not results.succeeded(ComparisonResults.ANNOTATION)
    assert ComparisonResults.ANNOTATION not in results.errors


def test_strictDiversity(threeSampleTables, writeTables, tmpdir):
    files = writeTables(threeSampleTables)
    with RepMultiRepertoire(files, task='diversity', strict=True, outdir=str(tmpdir.join("out")),
                            name='strict') as repertoire:
        results = repertoire.start()
    assert not results.succeeded(ComparisonResults.DIVERSITY)
    (subject, message), = results.errors[ComparisonResults.DIVERSITY]
    assert subject == 'C'
    assert 'chao1' in message


def test_overlapTask_withWorkers(twoSampleTables, tmpdir):
    tables = dict(twoSampleTables)
    tables['s3'] = DataFrame({'count': [1, 1], 'cdr3aa': ['CASSX', 'CASSQ'], 'v': ['TRBV1', 'TRBV1']})
    with RepMultiRepertoire(list(tables.values()), names=list(tables.keys()), task='overlap', threads=2,
                            outdir=str(tmpdir.join("out")), name='overlap') as repertoire:
        results = repertoire.start()
    assert results.overlap.loc['s1', 's2'] == pytest.approx(math.sqrt(1 / 3.0))
    assert results.overlap.loc['s3', 's2'] == pytest.approx(math.sqrt(0.5 * 0.5))
    assert results.diversity is None


def test_explicitPairs_unknownSample(twoSampleTables, tmpdir):
    with RepMultiRepertoire(list(twoSampleTables.values()), names=['s1', 's2'], task='overlap',
                            pairs=[('s1', 's2'), ('s2', 'ghost')], outdir=str(tmpdir.join("out")),
                            name='pairs') as repertoire:
        results = repertoire.start()
    assert results.succeeded(ComparisonResults.OVERLAP)
    assert [subject for subject, _ in results.errors[ComparisonResults.OVERLAP]] == [('s2', 'ghost')]
    assert list(results.overlapErrors) == [('s2', 'ghost')]


def test_loaderErrorsAreFatal(twoSampleTables, writeTables, tmpdir):
    files = writeTables(twoSampleTables)
    with pytest.raises(MissingSampleError):
        with RepMultiRepertoire(files + [str(tmpdir.join("absent.txt"))], names=['s1', 's2', 's3'],
                                task='diversity', outdir=str(tmpdir.join("out")), name='missing') as repertoire:
            repertoire.start()

    bad = DataFrame({'count': [1, -2], 'cdr3aa': ['CASSX', 'CASSY'], 'v': ['TRBV1', 'TRBV1']})
    with pytest.raises(MalformedRowError):
        with RepMultiRepertoire([bad], names=['bad'], task='diversity', outdir=str(tmpdir.join("out")),
                                name='malformed') as repertoire:
            repertoire.start()


def test_annotateNeedsReference(twoSampleTables, writeTables, tmpdir):
    with pytest.raises(ValueError):
        RepMultiRepertoire(writeTables(twoSampleTables), task='annotate', outdir=str(tmpdir.join("out")),
                           name='noref')
