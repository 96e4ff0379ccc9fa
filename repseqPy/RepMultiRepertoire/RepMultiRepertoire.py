'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''
import os
import logging
import inspect

from collections import defaultdict

from repseqPy.config import AUX_FOLDER, DIVERSITY_FOLDER, USAGE_FOLDER, OVERLAP_FOLDER, ANNOTATION_FOLDER, \
    DEFAULT_TASK, DEFAULT_NAME, DEFAULT_THREADS, DEFAULT_TOP_CLONE_VALUE, DEFAULT_COLUMNS, DEFAULT_SPECIES, \
    DEFAULT_GENE, DEFAULT_MHC_CLASS
from repseqPy.RepMultiRepertoire.PlotManager import PlotManager
from repseqPy.RepRepertoire.RepRepertoire import RepRepertoire
from repseqPy.RepRepertoire.repRepUtils import inferSampleName, createIfNot, writeSummary
from repseqPy.RepRepAuxiliary.diversityAuxiliary import calcDiversity, annotateSpectratypes, topClonotypes
from repseqPy.RepRepAuxiliary.usageAuxiliary import calcUsageMatrix, segmentUsage, usageCorrelation, clusterSamples
from repseqPy.RepRepAuxiliary.overlapAuxiliary import calcOverlapMatrix, clonotypeSets, sharedClonotypes
from repseqPy.RepRepAuxiliary.annotateAuxiliary import loadReferenceTable, filterReference, annotateClonotypes, \
    aggregateByAntigen, aggregateByHLA, annotatedFraction
from repseqPy.RepRepReporting.diversityReport import generateDiversityReport
from repseqPy.RepRepReporting.usageReport import generateUsageReport
from repseqPy.RepRepReporting.overlapReport import generateOverlapReport
from repseqPy.RepRepReporting.annotationReport import generateAnnotationReport
from repseqPy.versionManager import writeParams
from repseqPy.logger import printto, setupLogger, LEVEL


class ComparisonResults:
    """
    outputs of one comparison run. A component that failed keeps its outputs as None, its
    error(s) are listed in errors[component] as (subject, message) tuples where subject is
    the offending sample or pair, or None.
    """
    COMPONENTS = DIVERSITY, USAGE, OVERLAP, ANNOTATION = 'diversity', 'usage', 'overlap', 'annotation'

    def __init__(self, samples):
        self.samples = list(samples)
        # diversity
        self.diversity = None
        self.spectratypes = None
        self.topClonotypes = None
        # segment usage
        self.usage = None
        self.usageCorrelation = None
        self.usageOrder = None
        # pairwise overlap
        self.overlap = None
        self.overlapErrors = {}
        # annotation
        self.annotations = None
        self.antigens = None
        self.hla = None
        self.annotatedFraction = None

        self.errors = defaultdict(list)

    def succeeded(self, component):
        """
        :param component: one of ComparisonResults.COMPONENTS
        :return: bool, True if the component produced its main output
        """
        output = {
            ComparisonResults.DIVERSITY: self.diversity,
            ComparisonResults.USAGE: self.usage,
            ComparisonResults.OVERLAP: self.overlap,
            ComparisonResults.ANNOTATION: self.annotations
        }[component]
        return output is not None

    def __repr__(self):
        done = [c for c in ComparisonResults.COMPONENTS if self.succeeded(c)]
        return "ComparisonResults(samples={}, completed={}, errors={})".format(
            self.samples, done, dict((k, len(v)) for k, v in self.errors.items()))


class RepMultiRepertoire:
    """
    compares a fixed list of RepSeq samples: loads their clonotype tables once, then runs
    the requested analyses on the same (read-only) records
    """
    ops = DIVER, USAGE, OVERLAP, ANNOT = 'analyzeDiversity', 'analyzeUsage', 'analyzeOverlap', 'analyzeAnnotation'

    _components = {
        DIVER: ComparisonResults.DIVERSITY,
        USAGE: ComparisonResults.USAGE,
        OVERLAP: ComparisonResults.OVERLAP,
        ANNOT: ComparisonResults.ANNOTATION
    }

    def __init__(self, files, names=None, task=DEFAULT_TASK, reference=None, outdir='.', name=DEFAULT_NAME,
                 threads=DEFAULT_THREADS, species=DEFAULT_SPECIES, gene=DEFAULT_GENE, mhc=DEFAULT_MHC_CLASS,
                 strict=False, plot=False, clonelimit=float(DEFAULT_TOP_CLONE_VALUE), segmentLevel=False,
                 countCol=DEFAULT_COLUMNS['count'], cdr3Col=DEFAULT_COLUMNS['cdr3aa'], vCol=DEFAULT_COLUMNS['v'],
                 pairs=None, log=None, yaml=None):
        """

        :param files: list
                                clonotype tables, one per sample. Either paths to csv/tsv files (optionally
                                gzipped) or DataFrames
        :param names: list of strings
                                sample names, in the same order as files. This list (and its order) is the
                                set of analysed samples. Inferred from the file names if not provided
        :param task: string
                                all, diversity, usage, overlap or annotate. This variable
                                is also responsible for the "banner" printed in the log file.
        :param reference: string
                                path to a VDJdb table. Required if task was annotate, the annotation is skipped
                                if task was all and no reference was given
        :param outdir: string
                                path to results directory. implicitly create if doesn't exist
        :param name: string
                                name of this run, used as the logger name and as prefix of the output files
        :param threads: int
                                maximum number of processes used to compare sample pairs
        :param species: string
                                organism of the VDJdb entries to keep, None keeps all organisms
        :param gene: string
                                receptor chain of the VDJdb entries to keep, None keeps all chains
        :param mhc: string
                                MHC class of the VDJdb entries to keep, None keeps all classes
        :param strict: bool
                                if set, a diversity index that is undefined for a sample fails the diversity
                                analysis instead of being reported as NaN
        :param plot: bool
                                plot figures next to the tables
        :param clonelimit: int
                                number of most abundant clonotypes written per sample into
                                diversity/clonotypes/<sample_name>_clonotypes_<clonelimit>_over.csv. Also accepts
                                float('inf') to retain all clones
        :param segmentLevel: bool
                                merge clonotypes that only differ in the allele of their V segment
        :param countCol: string
                                name of the read count column in the sample tables
        :param cdr3Col: string
                                name of the CDR3 amino acid sequence column in the sample tables
        :param vCol: string
                                name of the V segment column in the sample tables
        :param pairs: list of 2-tuples
                                sample pairs to compare. Defaults to all pairs of samples
        :param log: string
                                path to logger file
        :param yaml: string
                                dummy variable. Used in commandline mode
        """
        fargs, _, _, values = inspect.getargvalues(inspect.currentframe())
        self.args = dict([(arg, values[arg]) for arg in fargs if arg != 'self'])

        if names is None:
            names = [inferSampleName(f) for f in files]
        if len(names) != len(files):
            raise ValueError("{} sample names were given for {} clonotype tables".format(len(names), len(files)))

        self.task = task.lower().strip()
        self.name = name
        self.samples = list(names)
        self.sources = dict(zip(self.samples, files))
        self.columns = {'count': countCol, 'cdr3aa': cdr3Col, 'v': vCol}
        self.segmentLevel = segmentLevel
        self.reference = reference
        self.species = species
        self.gene = gene
        self.mhc = mhc
        self.strict = strict
        self.threads = threads
        self.clonelimit = clonelimit
        self.pairs = pairs

        # directory creation
        self.outdir = os.path.abspath(outdir)
        self.auxDir = os.path.join(self.outdir, AUX_FOLDER, self.name) + os.path.sep
        createIfNot(self.auxDir)

        if log is None:
            log = os.path.join(self.auxDir, self.name + ".log")
        setupLogger(self.name, self.task, log)
        PlotManager(plot)
        writeParams(self.args, self.auxDir)

        self.repertoire = None
        self.results = ComparisonResults(self.samples)
        self._tasks = self._setupTasks()
        self._summaryFile = os.path.join(self.auxDir, "summary.txt")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logger = logging.getLogger(self.name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def start(self):
        """
        loads the samples then runs every requested analysis. Loading errors abort the run, an
        error raised by an analysis is logged and recorded in the results, and the next analysis
        is started.

        :return: ComparisonResults
        """
        logger = logging.getLogger(self.name)
        self.loadRepertoire()

        while True:
            task, args, kwargs = self._nextTask()
            if task is None:
                break
            try:
                getattr(self, task)(*args, **kwargs)
            except Exception as e:
                printto(logger, "An error occurred while processing " + task + ": " + str(e), LEVEL.EXCEPT)
                self.results.errors[self._components[task]].append((getattr(e, 'sampleId', None), str(e)))
        return self.results

    def loadRepertoire(self):
        logger = logging.getLogger(self.name)
        if self.repertoire is not None:
            return self.repertoire
        printto(logger, "The clonotype tables of {} samples are being loaded ... ".format(len(self.samples)))
        self.repertoire = RepRepertoire.fromTables(self.samples, self.sources, columns=self.columns,
                                                   segmentLevel=self.segmentLevel, stream=logger)
        writeSummary(self._summaryFile, "Samples", len(self.samples))
        writeSummary(self._summaryFile, "Clonotypes", len(self.repertoire))
        writeSummary(self._summaryFile, "Reads", int(self.repertoire.totals().sum()))
        printto(logger, "Loaded " + repr(self.repertoire), LEVEL.INFO)
        return self.repertoire

    def analyzeDiversity(self):
        logger = logging.getLogger(self.name)
        outResDir = os.path.join(self.outdir, DIVERSITY_FOLDER)
        createIfNot(outResDir)

        records = self.repertoire.records
        self.results.diversity = calcDiversity(records, self.samples, strict=self.strict, stream=logger)

        printto(logger, "Spectratypes are being calculated ... ")
        self.results.spectratypes = annotateSpectratypes(records)
        self.results.topClonotypes = topClonotypes(records, self.clonelimit)

        undefined = (self.results.diversity['undefined'] != '').sum()
        writeSummary(self._summaryFile, "SamplesWithUndefinedDiversity", int(undefined))

        generateDiversityReport(self.results.diversity, self.results.spectratypes, self.results.topClonotypes,
                                self.name, outResDir, self.clonelimit, stream=logger)
        paramFile = writeParams(self.args, outResDir)
        printto(logger, "The analysis parameters have been written to " + paramFile)

    def analyzeUsage(self):
        logger = logging.getLogger(self.name)
        outResDir = os.path.join(self.outdir, USAGE_FOLDER)
        createIfNot(outResDir)

        records = self.repertoire.records
        matrix = calcUsageMatrix(records, self.samples, stream=logger)
        self.results.usage = matrix
        self.results.usageCorrelation = usageCorrelation(matrix)
        link, self.results.usageOrder = clusterSamples(matrix)
        writeSummary(self._summaryFile, "SharedSegments", matrix.shape[1])

        generateUsageReport(segmentUsage(records), matrix, self.results.usageCorrelation, link, self.name,
                            outResDir, stream=logger)
        paramFile = writeParams(self.args, outResDir)
        printto(logger, "The analysis parameters have been written to " + paramFile)

    def analyzeOverlap(self):
        logger = logging.getLogger(self.name)
        outResDir = os.path.join(self.outdir, OVERLAP_FOLDER)
        createIfNot(outResDir)

        records = self.repertoire.records
        matrix, errors = calcOverlapMatrix(records, self.samples, pairs=self.pairs, threads=self.threads,
                                           stream=logger)
        self.results.overlap = matrix
        self.results.overlapErrors = errors
        for pair, message in errors.items():
            self.results.errors[ComparisonResults.OVERLAP].append((pair, message))
        writeSummary(self._summaryFile, "FailedPairs", len(errors))

        sets = clonotypeSets(records, self.samples)
        generateOverlapReport(matrix, errors, sharedClonotypes(records, self.samples), sets, self.name,
                              outResDir, stream=logger)
        paramFile = writeParams(self.args, outResDir)
        printto(logger, "The analysis parameters have been written to " + paramFile)

    def analyzeAnnotation(self):
        logger = logging.getLogger(self.name)
        outResDir = os.path.join(self.outdir, ANNOTATION_FOLDER)
        createIfNot(outResDir)

        reference = filterReference(loadReferenceTable(self.reference, stream=logger),
                                    species=self.species, gene=self.gene, mhcClass=self.mhc, stream=logger)
        annotations = annotateClonotypes(self.repertoire.records, reference, stream=logger)
        self.results.annotations = annotations
        self.results.antigens = aggregateByAntigen(annotations)
        self.results.hla = aggregateByHLA(annotations)
        self.results.annotatedFraction = annotatedFraction(annotations, self.samples)
        writeSummary(self._summaryFile, "AnnotatedClonotypes",
                     len(annotations.drop_duplicates(subset=['sample', 'v', 'cdr3aa'])))

        generateAnnotationReport(annotations, self.results.antigens, self.results.hla,
                                 self.results.annotatedFraction, self.name, outResDir, stream=logger)
        paramFile = writeParams(self.args, outResDir)
        printto(logger, "The analysis parameters have been written to " + paramFile)

    def _nextTask(self):
        if len(self._tasks) > 0:
            return self._tasks.pop(), [], {}
        return None, [], {}

    def _setupTasks(self):
        logger = logging.getLogger(self.name)
        todo = []
        if self.task == 'all':
            todo += [RepMultiRepertoire.DIVER, RepMultiRepertoire.USAGE, RepMultiRepertoire.OVERLAP]
            if self.reference is not None:
                todo.append(RepMultiRepertoire.ANNOT)
            else:
                printto(logger, "No VDJdb table was provided, the antigen specificity annotation will be skipped",
                        LEVEL.WARN)
        elif self.task == 'diversity':
            todo.append(RepMultiRepertoire.DIVER)
        elif self.task == 'usage':
            todo.append(RepMultiRepertoire.USAGE)
        elif self.task == 'overlap':
            todo.append(RepMultiRepertoire.OVERLAP)
        elif self.task == 'annotate':
            if self.reference is None:
                raise ValueError("A VDJdb table is required to annotate clonotypes")
            todo.append(RepMultiRepertoire.ANNOT)
        else:
            raise ValueError("Unknown task requested: {}".format(self.task))

        # reverse it so that the first to be popped out is the original first element
        return todo[::-1]
