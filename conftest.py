import pytest
import numpy

from pandas import DataFrame


@pytest.fixture(autouse=True)
def add_np(doctest_namespace):
    doctest_namespace['np'] = numpy


@pytest.fixture(autouse=True)
def add_raises(doctest_namespace):
    doctest_namespace['raises'] = pytest.raises


@pytest.fixture
def twoSampleTables():
    """
    two VDJtools-like tables sharing a single clonotype (TRBV1, CASSX)
    """
    return {
        's1': DataFrame({'count': [10, 5], 'cdr3aa': ['CASSX', 'CASSY'], 'v': ['TRBV1', 'TRBV2']}),
        's2': DataFrame({'count': [5, 5], 'cdr3aa': ['CASSX', 'CASSZ'], 'v': ['TRBV1', 'TRBV3']})
    }


@pytest.fixture
def threeSampleTables():
    return {
        'A': DataFrame({'count': [1, 1, 2, 3, 7],
                        'cdr3aa': ['CASSLG', 'CASSPR', 'CASSQE', 'CASRTG', 'CASSIRSSYEQYF'],
                        'v': ['TRBV5-1', 'TRBV5-1', 'TRBV7-9', 'TRBV20-1', 'TRBV7-9']}),
        'B': DataFrame({'count': [4, 2, 2, 1],
                        'cdr3aa': ['CASSLG', 'CASSIRSSYEQYF', 'CASSWE', 'CASSPR'],
                        'v': ['TRBV5-1', 'TRBV7-9', 'TRBV20-1', 'TRBV28']}),
        'C': DataFrame({'count': [3, 3, 1],
                        'cdr3aa': ['CASSLG', 'CASSNM', 'CASSIRSSYEQYF'],
                        'v': ['TRBV5-1', 'TRBV20-1', 'TRBV7-9']})
    }


@pytest.fixture
def vdjdbTable():
    """
    a few rows with VDJdb column names. CASSIRSSYEQYF matches two HLA-A*02 epitopes
    """
    return DataFrame({
        'gene': ['TRB', 'TRB', 'TRB', 'TRA', 'TRB', 'TRB'],
        'cdr3': ['CASSIRSSYEQYF', 'CASSIRSSYEQYF', 'CASSLG', 'CASSLG', 'CASSPR', 'CASSQE'],
        'species': ['HomoSapiens', 'HomoSapiens', 'HomoSapiens', 'HomoSapiens', 'MusMusculus', 'HomoSapiens'],
        'mhc.a': ['HLA-A*02:01', 'HLA-A*02:01:48', 'HLA-B*08:01', 'HLA-A*02:01', 'H2-Kb', 'HLA-DRA*01:01'],
        'mhc.class': ['MHCI', 'MHCI', 'MHCI', 'MHCI', 'MHCI', 'MHCII'],
        'antigen.epitope': ['GILGFVFTL', 'NLVPMVATV', 'RAKFKQLL', 'GILGFVFTL', 'SSIEFARL', 'PKYVKQNTLKLAT'],
        'antigen.species': ['InfluenzaA', 'CMV', 'EBV', 'InfluenzaA', 'HSV-1', 'InfluenzaA']
    })


@pytest.fixture
def writeTables(tmpdir):
    """
    writes tables (dict name => DataFrame) into tmpdir as tab separated files
    :return: function returning the list of paths, in the order of the dict
    """
    def _write(tables, ext='.txt'):
        paths = []
        for name, table in tables.items():
            path = str(tmpdir.join(name + ext))
            table.to_csv(path, sep=',' if ext.startswith('.csv') else '\t', index=False)
            paths.append(path)
        return paths
    return _write
