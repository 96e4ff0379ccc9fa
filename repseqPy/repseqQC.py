#!/usr/bin/env python

'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

import sys
import time
import traceback
import warnings

from datetime import timedelta

from repseqPy.RepMultiRepertoire.RepMultiRepertoire import RepMultiRepertoire
from repseqPy.argsParser import parseArgs
from repseqPy.config import VERSION
from repseqPy.logger import formattedTitle

warnings.simplefilter(action="ignore", category=FutureWarning)
warnings.simplefilter(action="ignore", category=DeprecationWarning)

__version__ = VERSION


def main():
    startTimeStr = time.strftime("%Y-%m-%d %H:%M:%S")
    startTime = time.time()
    try:
        argsVals = parseArgs()

        with RepMultiRepertoire(**vars(argsVals)) as repertoire:
            # show a pretty banner before beginning analysis
            print(formattedTitle(argsVals.task))
            results = repertoire.start()

        for component, errors in sorted(results.errors.items()):
            for subject, message in errors:
                print("{} failed{}: {}".format(component, "" if subject is None else " for {}".format(subject),
                                               message))
        print("The analysis started at " + startTimeStr)
        print("The analysis took {}".format(timedelta(seconds=int(round(time.time() - startTime)))))
        print("repseqPy version " + VERSION)
    except Exception as e:
        print("Unexpected error: " + str(e))
        print('-' * 60)
        traceback.print_exc(file=sys.stdout)
        print('-' * 60)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
