import argparse
import os
import numpy
import pandas
import scipy
import datetime

from repseqPy.config import VERSION


def writeParams(args, outDir):
    """
    Writes the parameters used for analysis into analysis.params

    :param args: argparse.Namespace or dict type
            argparse namespace object, or a dict

    :param outDir: string
            output directory where analysis.params reside

    :return: string
            the filename that was produced in outDir
    """
    if isinstance(args, argparse.Namespace):
        args = vars(args)
    elif isinstance(args, dict):
        pass
    else:
        raise Exception("Unsupported parameter type {}, expecting argparse.Namespace or dict".format(type(args)))

    filename = os.path.join(outDir, "analysis.params")

    with open(filename, 'w') as out:
        out.write("repseqPy version: " + VERSION + "\n")
        out.write("VDJdb version - reference table last modified time : "
                  + _getReferenceDate(args.get('reference', None)) + "\n")
        out.write("pandas version: " + str(pandas.__version__) + "\n")
        out.write("numpy version: " + str(numpy.__version__) + "\n")
        out.write("scipy version: " + str(scipy.__version__) + "\n")
        out.write("Executed repseqPy with the following parameters:\n")
        for key, val in args.items():
            out.write("Parameter: {:17}\tValue: {:>20}\n".format(key, os.path.expandvars(_printable(val))))
    return os.path.basename(filename)


def _printable(val):
    # DataFrames given through the API are summarised rather than dumped
    if isinstance(val, (list, tuple)):
        return ",".join(_printable(v) for v in val)
    if isinstance(val, pandas.DataFrame):
        return "<table of {} rows>".format(len(val))
    return str(val)


def _getReferenceDate(fname):
    if fname is None:
        return "-"
    fname = os.path.abspath(os.path.expandvars(fname))
    if os.path.exists(fname):
        return str(datetime.datetime.fromtimestamp(os.path.getmtime(fname)).replace(microsecond=0))
    return "-"
