'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

import re
import os


_TABLE_EXTENSIONS = ('.txt', '.tsv', '.csv', '.tab')


def detectSeparator(fname):
    """
    detects the column separator of a clonotype table from its extension (it can be zipped)
    :param fname: filename of the table (fname can be zipped)
    :return: "," for csv files, "\\t" otherwise (VDJtools, MiXCR and VDJdb tables are tab separated)

    >>> detectSeparator("A2-i129.csv.gz")
    ','
    >>> detectSeparator("A2-i129.txt") == '\\t'
    True
    """
    name = fname[:-len(".gz")] if fname.endswith(".gz") else fname
    if name.lower().endswith(".csv"):
        return ","
    return "\t"


def inferSampleName(fname):
    """
    infers the sample name from a given file.
    EG: A2-i129.txt.gz          => A2-i129
        A2-i129.clonotypes.tsv  => A2-i129.clonotypes
        /path/to/Sample1.csv    => Sample1

    :param fname: string
            filename to infer from

    :return: string
            inferred sample name from fname

    >>> inferSampleName("/data/A2-i129.txt.gz")
    'A2-i129'
    >>> inferSampleName("A2-i129.clonotypes.tsv")
    'A2-i129.clonotypes'
    """
    name = os.path.basename(fname)
    if name.endswith(".gz"):
        name = name[:-len(".gz")]
    root, ext = os.path.splitext(name)
    if ext.lower() in _TABLE_EXTENSIONS:
        return root
    return name


def compressSegmentAllele(segment):
    """
    drops the allele part of a segment name, VDJtools and MiXCR may report either

    >>> compressSegmentAllele("TRBV12-3*01")
    'TRBV12-3'
    >>> compressSegmentAllele("TRBV12-3")
    'TRBV12-3'
    """
    return segment.split('*')[0]


def createIfNot(directory):
    if not os.path.exists(directory):
        os.makedirs(directory)


def writeSummary(filename, key, value):
    if os.path.exists(filename):
        with open(filename) as fp:
            string = fp.read()
    else:
        string = ""

    with open(filename, 'w') as fp:
        if re.search("^" + re.escape(key) + ":.*$", string, re.MULTILINE):
            string = re.sub("^" + re.escape(key) + ":.*$", "{}:{}".format(key, value), string, flags=re.MULTILINE)
        else:
            string += "{}:{}\n".format(key, value)
        fp.write(string)
