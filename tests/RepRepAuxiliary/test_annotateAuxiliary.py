import pytest

from pandas import DataFrame

from repseqPy.RepRepAuxiliary.annotateAuxiliary import *
from repseqPy.RepRepAuxiliary.loaderAuxiliary import loadSamples


def _reference(vdjdbTable, tmpdir):
    path = str(tmpdir.join("vdjdb.slim.txt"))
    vdjdbTable.to_csv(path, sep='\t', index=False)
    return loadReferenceTable(path)


def test_loadReferenceTable(vdjdbTable, tmpdir):
    reference = _reference(vdjdbTable, tmpdir)
    assert len(reference) == 6
    assert set(['cdr3', 'epitope', 'mhc', 'antigenSpecies', 'species', 'gene', 'mhcClass']) <= set(reference.columns)

    path = str(tmpdir.join("broken.txt"))
    vdjdbTable.drop(columns=['antigen.species']).to_csv(path, sep='\t', index=False)
    with pytest.raises(ValueError):
        loadReferenceTable(path)


def test_extractAlleleGroup():
    assert extractAlleleGroup("HLA-A*02:01") == "HLA-A*02"
    assert extractAlleleGroup("HLA-A*02:01:48") == "HLA-A*02"
    assert extractAlleleGroup("H2-Kb") == "H2-Kb"


def test_filterReference(vdjdbTable, tmpdir):
    reference = _reference(vdjdbTable, tmpdir)
    filtered = filterReference(reference)
    # the TRA, mouse and MHCII rows are dropped
    assert len(filtered) == 3
    assert set(filtered['gene']) == {'TRB'}
    assert list(filtered['hla']) == ['HLA-A*02', 'HLA-A*02', 'HLA-B*08']

    # a filter set to None is not applied
    assert len(filterReference(reference, species=None)) == 4
    assert len(filterReference(reference, species=None, gene=None, mhcClass=None)) == 6


def test_annotateClonotypes(threeSampleTables, vdjdbTable, tmpdir):
    records = loadSamples(['A', 'B', 'C'], threeSampleTables)
    annotations = annotateClonotypes(records, filterReference(_reference(vdjdbTable, tmpdir)))

    assert list(annotations.columns) == ANNOTATION_COLUMNS
    # CASSIRSSYEQYF matches 2 entries (fan-out is kept), CASSLG matches 1 entry; both in all three samples
    assert len(annotations) == 9
    a = annotations[annotations['sample'] == 'A']
    assert sorted(a['epitope']) == ['GILGFVFTL', 'NLVPMVATV', 'RAKFKQLL']
    # CASSPR only matches a mouse entry, CASSQE an MHCII entry
    assert not annotations['cdr3aa'].isin(['CASSPR', 'CASSQE']).any()


def test_annotateClonotypes_wrongOrganism(threeSampleTables, vdjdbTable, tmpdir):
    records = loadSamples(['A', 'B', 'C'], threeSampleTables)
    reference = filterReference(_reference(vdjdbTable, tmpdir), species='GallusGallus')
    assert len(reference) == 0

    annotations = annotateClonotypes(records, reference)
    assert len(annotations) == 0
    assert list(annotations.columns) == ANNOTATION_COLUMNS
    assert len(aggregateByAntigen(annotations)) == 0
    assert annotatedFraction(annotations, ['A', 'B']).tolist() == [0.0, 0.0]


def test_aggregates(threeSampleTables, vdjdbTable, tmpdir):
    records = loadSamples(['A', 'B', 'C'], threeSampleTables)
    annotations = annotateClonotypes(records, filterReference(_reference(vdjdbTable, tmpdir)))
    freqs = records.set_index(['sample', 'cdr3aa'])['freq']

    antigens = aggregateByAntigen(annotations).set_index(['sample', 'antigenSpecies'])
    # CASSIRSSYEQYF matches InfluenzaA and CMV, its frequency is shared between them
    assert antigens.loc[('A', 'CMV'), 'freq'] == pytest.approx(freqs[('A', 'CASSIRSSYEQYF')] / 2)
    assert antigens.loc[('A', 'InfluenzaA'), 'freq'] == pytest.approx(freqs[('A', 'CASSIRSSYEQYF')] / 2)
    assert antigens.loc[('A', 'EBV'), 'freq'] == pytest.approx(freqs[('A', 'CASSLG')])

    hla = aggregateByHLA(annotations).set_index(['sample', 'hla'])
    # two HLA-A*02 entries for the same clonotype are counted once
    assert hla.loc[('A', 'HLA-A*02'), 'freq'] == pytest.approx(freqs[('A', 'CASSIRSSYEQYF')])
    assert hla.loc[('A', 'HLA-A*02'), 'clonotypes'] == 1
    for total in hla.groupby(level='sample')['freq'].sum():
        assert total <= 1.0

    fraction = annotatedFraction(annotations, ['A', 'B', 'C'])
    assert fraction['A'] == pytest.approx(freqs[('A', 'CASSIRSSYEQYF')] + freqs[('A', 'CASSLG')])


def test_aggregates_clonotypeInSeveralGroups():
    records = loadSamples(['s'], {'s': DataFrame({'count': [9, 1], 'cdr3aa': ['CASSX', 'CASSY'],
                                                  'v': ['TRBV1', 'TRBV2']})})
    reference = DataFrame({
        'cdr3': ['CASSX', 'CASSX', 'CASSY'],
        'epitope': ['GILGFVFTL', 'NLVPMVATV', 'GILGFVFTL'],
        'antigenSpecies': ['InfluenzaA', 'CMV', 'InfluenzaA'],
        'mhc': ['HLA-A*02:01', 'HLA-B*07:02', 'HLA-A*02:01']
    })
    annotations = annotateClonotypes(records, reference)

    antigens = aggregateByAntigen(annotations)
    hla = aggregateByHLA(annotations)
    for table in (antigens, hla):
        for total in table.groupby('sample')['freq'].sum():
            assert total == pytest.approx(1.0)

    antigens = antigens.set_index('antigenSpecies')
    assert antigens.loc['CMV', 'freq'] == pytest.approx(0.45)
    assert antigens.loc['InfluenzaA', 'freq'] == pytest.approx(0.55)
    assert antigens.loc['InfluenzaA', 'clonotypes'] == 2
    assert hla.set_index('hla').loc['HLA-B*07', 'freq'] == pytest.approx(0.45)
    assert annotatedFraction(annotations)['s'] == pytest.approx(1.0)
