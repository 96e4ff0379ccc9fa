import os

import pytest

from repseqPy.argsParser import *


def test_parseArgs_files(twoSampleTables, writeTables, tmpdir):
    files = writeTables(twoSampleTables)
    args = parseArgs(['-f'] + files + ['-t', 'overlap', '-q', '2', '-o', str(tmpdir)])
    assert args.names == ['s1', 's2']
    assert args.files == [os.path.abspath(f) for f in files]
    assert args.task == 'overlap'
    assert args.threads == 2
    assert args.clonelimit == 100
    assert args.species == 'HomoSapiens' and args.gene == 'TRB' and args.mhc == 'MHCI'
    assert not args.strict and not args.plot


def test_parseArgs_names(twoSampleTables, writeTables):
    files = writeTables(twoSampleTables)
    args = parseArgs(['-f'] + files + ['-n', 'first', 'second', '-cl', 'inf', '--gene', 'any'])
    assert args.names == ['first', 'second']
    assert args.clonelimit == float('inf')
    assert args.gene is None


def test_parseArgs_errors(twoSampleTables, writeTables, tmpdir):
    files = writeTables(twoSampleTables)
    # argparse exits on errors
    with pytest.raises(SystemExit):
        parseArgs([])
    with pytest.raises(SystemExit):
        parseArgs(['-f', str(tmpdir.join("absent.txt"))])
    with pytest.raises(SystemExit):
        parseArgs(['-f'] + files + ['-n', 'only_one'])
    with pytest.raises(SystemExit):
        parseArgs(['-f'] + files + ['-n', 'same', 'same'])
    with pytest.raises(SystemExit):
        parseArgs(['-f'] + files + ['-t', 'annotate'])
    with pytest.raises(SystemExit):
        parseArgs(['-f'] + files + ['-t', 'abundance'])


def test_parseYAML(twoSampleTables, writeTables, tmpdir):
    files = writeTables(twoSampleTables)
    yamlFile = str(tmpdir.join("samples.yml"))
    with open(yamlFile, 'w') as fp:
        fp.write("defaults:\n"
                 "  task: diversity\n"
                 "  strict:\n"
                 "  run-name: cohort\n"
                 "---\n"
                 "name: first\n"
                 "file: {}\n"
                 "---\n"
                 "file: {}\n".format(files[0], files[1]))

    argsList = parseYAML(yamlFile)
    assert argsList[:argsList.index('--files')] == ['--task', 'diversity', '--strict', '--run-name', 'cohort']
    assert argsList[argsList.index('--names') + 1:] == ['first', 's2']

    args = parseArgs(['-y', yamlFile])
    assert args.task == 'diversity'
    assert args.strict
    assert args.name == 'cohort'
    assert args.names == ['first', 's2']
    assert args.yaml == os.path.abspath(yamlFile)


def test_parseYAML_errors(tmpdir):
    yamlFile = str(tmpdir.join("bad.yml"))
    with open(yamlFile, 'w') as fp:
        fp.write("defaults:\n"
                 "  yaml: other.yml\n")
    with pytest.raises(Exception, match="YAMLception"):
        parseYAML(yamlFile)

    with open(yamlFile, 'w') as fp:
        fp.write("name: s1\n"
                 "file: s1.txt\n"
                 "task: usage\n")
    with pytest.raises(ValueError):
        parseYAML(yamlFile)

    with open(yamlFile, 'w') as fp:
        fp.write("name: s1\n")
    with pytest.raises(ValueError):
        parseYAML(yamlFile)
