'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''
import os
import argparse
import yaml

from copy import deepcopy

from repseqPy.RepRepertoire.repRepUtils import inferSampleName
from repseqPy.config import VERSION, DEFAULT_TOP_CLONE_VALUE, DEFAULT_TASK, DEFAULT_NAME, DEFAULT_THREADS, \
    DEFAULT_COLUMNS, DEFAULT_SPECIES, DEFAULT_GENE, DEFAULT_MHC_CLASS


TASKS = ["all", "diversity", "usage", "overlap", "annotate"]


def parseArgs(arguments=None):
    """
    Parses sys.argv's arguments and sanitize them. Checks the logic of arguments so calling program does not have
    to do any logic checking after this call.
    :param arguments: custom arguments or sys.argv (default)
    :return: argparse namespace object, using dot notation to retrieve value: args.value
    """

    parser, args = parseCommandLineArguments(arguments)

    # --------------------------------------------------------------------------------------------------------
    #                        A YAML file replaces the command line altogether
    # --------------------------------------------------------------------------------------------------------
    if args.yaml is not None:
        if args.files is not None:
            parser.error("-f/--files and -y/--yaml cannot be used together, samples should be listed in the YAML file")
        yamlFile = os.path.abspath(args.yaml)
        if not os.path.exists(yamlFile):
            parser.error("-y {} not found!".format(args.yaml))
        args = parseArgs(parseYAML(yamlFile))
        args.yaml = yamlFile
        return args

    # --------------------------------------------------------------------------------------------------------
    #                                       Canonicalize all values
    # --------------------------------------------------------------------------------------------------------
    args.task = args.task.lower()
    args.outdir = os.path.abspath(args.outdir)

    # --------------------------------------------------------------------------------------------------------
    #                        Check for -f file existence and sample names
    # --------------------------------------------------------------------------------------------------------
    if not args.files:
        parser.error("Either one of -f/--files or -y/--yaml must be specified!")
    for f in args.files:
        if not os.path.isfile(f):
            parser.error("-f {} not found!".format(f))
    args.files = [os.path.abspath(f) for f in args.files]

    # the sample list is explicit: names are given, or inferred one to one from the files
    if args.names is None:
        args.names = [inferSampleName(f) for f in args.files]
    elif len(args.names) != len(args.files):
        parser.error("{} sample names were given for {} files, -n/--names should name every file of -f/--files"
                     .format(len(args.names), len(args.files)))
    duplicated = sorted(set(n for n in args.names if args.names.count(n) > 1))
    if duplicated:
        parser.error("Sample names should be unique, found duplicates: {}. Use -n/--names to name the samples."
                     .format(', '.join(duplicated)))

    # --------------------------------------------------------------------------------------------------------
    #                                    Parse clone limit option
    # --------------------------------------------------------------------------------------------------------
    if args.clonelimit is None:
        args.clonelimit = float(DEFAULT_TOP_CLONE_VALUE)
    elif str(args.clonelimit).lower() == 'inf':
        args.clonelimit = float('inf')
    else:
        try:
            args.clonelimit = int(args.clonelimit)
        except ValueError:
            parser.error("--clonelimit expects a number or inf, got {}".format(args.clonelimit))

    if args.threads < 1:
        parser.error("-q/--threads should be at least 1")

    # --------------------------------------------------------------------------------------------------------
    #                                   VDJdb (annotation) check
    # --------------------------------------------------------------------------------------------------------
    if args.reference is not None:
        args.reference = os.path.abspath(os.path.expandvars(args.reference))
        if not os.path.exists(args.reference):
            parser.error("File provided to -r / --reference {} cannot be found!".format(args.reference))
    elif args.task == 'annotate':
        parser.error("A VDJdb table (-r / --reference) should be provided if --task annotate was specified")

    # 'any' switches the corresponding reference filter off
    for field in ('species', 'gene', 'mhc'):
        if str(getattr(args, field)).lower() == 'any':
            setattr(args, field, None)

    # done
    return args


def parseCommandLineArguments(arguments=None):
    """
    parses commandline arguments for repseq
    :param arguments: sys.argv by default. Pass a list of strings otherwise
    :return: parser object, can be indexed for flag values
    """
    parser = argparse.ArgumentParser(description='repseq - comparative analysis of immune repertoire '
                                                 'sequencing samples',
                                     prog="repseq", add_help=False)
    optional = parser.add_argument_group('optional arguments')
    inputArgs = parser.add_argument_group('clonotype tables', 'Arguments related to the sample tables')
    annotationArgs = parser.add_argument_group("antigen specificity annotation",
                                               "Arguments related to --task annotate")
    inputArgs.add_argument('-f', '--files', nargs='+', help="paths to the clonotype tables, one per sample "
                                                            "(VDJtools format, csv or tab separated, optionally "
                                                            "gzipped). Can only be omitted if -y/--yaml is "
                                                            "specified.", default=None)
    inputArgs.add_argument('-n', '--names', nargs='+', help="sample names, one per file of -f/--files and in the "
                                                            "same order. [default = names inferred from the files]",
                           default=None)
    inputArgs.add_argument('-cc', '--count-col', dest='countCol', default=DEFAULT_COLUMNS['count'],
                           help="name of the read count column. [default={}]".format(DEFAULT_COLUMNS['count']))
    inputArgs.add_argument('-ac', '--cdr3-col', dest='cdr3Col', default=DEFAULT_COLUMNS['cdr3aa'],
                           help="name of the CDR3 amino acid sequence column. [default={}]"
                           .format(DEFAULT_COLUMNS['cdr3aa']))
    inputArgs.add_argument('-vc', '--v-col', dest='vCol', default=DEFAULT_COLUMNS['v'],
                           help="name of the V segment column. [default={}]".format(DEFAULT_COLUMNS['v']))
    inputArgs.add_argument('-sl', '--segment-level', dest='segmentLevel', action='store_true',
                           help="if specified, V segment alleles are dropped (TRBV12-3*01 becomes TRBV12-3) "
                                "before identical clonotypes are merged. [default = keep alleles]")
    optional.add_argument('-t', '--task', default=DEFAULT_TASK, help="analysis task, supported tasks: "
                                                                     "all, diversity, usage, overlap, annotate. "
                                                                     "[default={}]".format(DEFAULT_TASK),
                          choices=TASKS)
    optional.add_argument('-o', '--outdir', help="output directory. [default = current working directory]",
                          default="./")
    optional.add_argument('-rn', '--run-name', dest='name', help="name of analysis, used as prefix of the "
                                                                 "output files. [default={}]".format(DEFAULT_NAME),
                          default=DEFAULT_NAME)
    optional.add_argument('-cl', '--clonelimit', help="determines the number of clonotypes saved per sample in "
                                                      "\"<OUTDIR>/diversity/clonotypes/\""
                                                      ". Expects a number or inf to retain all clones [default={}]."
                          .format(DEFAULT_TOP_CLONE_VALUE),
                          default=None)
    optional.add_argument('-s', '--strict', action='store_true',
                          help="if specified, a diversity index that is undefined for a sample (Chao1 without "
                               "doubletons, Shannon entropy of a single clonotype) fails the diversity analysis. "
                               "[default = reported as empty and logged]")
    optional.add_argument('-p', '--plot', action='store_true', help="if specified, figures are plotted next to the "
                                                                    "tables. [default = tables only]")
    optional.add_argument('-y', '--yaml', help="path to yaml file. This file lists the samples to compare "
                                               "and the parameters of the analysis. Refer to the README "
                                               "for more information.",
                          required=False, default=None)
    annotationArgs.add_argument('-r', '--reference', help="path to a VDJdb table (e.g. vdjdb.slim.txt), required if"
                                                          " --task annotate is specified. With --task all, the "
                                                          "annotation is skipped if it is missing.", default=None)
    annotationArgs.add_argument('-sp', '--species', default=DEFAULT_SPECIES,
                                help="keep VDJdb entries of this organism, 'any' to keep all. [default={}]"
                                .format(DEFAULT_SPECIES))
    annotationArgs.add_argument('-g', '--gene', default=DEFAULT_GENE,
                                help="keep VDJdb entries of this receptor chain, 'any' to keep all. [default={}]"
                                .format(DEFAULT_GENE))
    annotationArgs.add_argument('-mc', '--mhc', default=DEFAULT_MHC_CLASS,
                                help="keep VDJdb entries of this MHC class, 'any' to keep all. [default={}]"
                                .format(DEFAULT_MHC_CLASS))
    optional.add_argument('-q', '--threads', help="number of processes used to compare sample pairs. [default={}]"
                          .format(DEFAULT_THREADS), type=int, default=DEFAULT_THREADS)
    optional.add_argument('-v', '--version', action='version', version='%(prog)s ' + VERSION)
    optional.add_argument('-h', '--help', action='help', help="show this help message and exit")
    return parser, parser.parse_args() if arguments is None else parser.parse_args(arguments)


def parseYAML(yamlFile):
    """
    Parses the YAML file without checking if the values are valid. It's up to parseArgs to check

    The file holds an optional 'defaults' document with the analysis parameters (long argument names) and
    one document per sample with a 'file' and optionally a 'name', for example:

        defaults:
            task: all
            reference: vdjdb.slim.txt
        ---
        name: A2-i129
        file: A2-i129.txt.gz
        ---
        file: A2-i131.txt.gz

    :param yamlFile: string
                path to yaml file
    :return: list
                long args followed by their values, eg:
                ['--task', 'all', '--reference', 'vdjdb.slim.txt', '--files', 'A2-i129.txt.gz', 'A2-i131.txt.gz',
                 '--names', 'A2-i129', 'A2-i131']
    """
    DEFAULTS_KEY = 'defaults'
    SAMPLE_KEYS = ('name', 'file')
    with open(yamlFile) as fp:
        documents = [doc for doc in yaml.safe_load_all(fp) if doc is not None]

    defaults = {}
    samples = []
    for doc in documents:
        if not isinstance(doc, dict):
            raise ValueError("Expecting key:value pairs in every YAML document, got {} instead".format(doc))
        if DEFAULTS_KEY in doc:
            # make sure the only key in the 'defaults' document is 'defaults'
            if len(doc) != 1:
                raise ValueError("'defaults' expects one key:value pair, got {} instead".format(len(doc)))
            defaults = deepcopy(doc[DEFAULTS_KEY]) or {}
        else:
            unknown = [k for k in doc if k not in SAMPLE_KEYS]
            if unknown:
                raise ValueError("Sample documents only accept {}, got {}. Analysis parameters belong to the "
                                 "'defaults' document.".format(', '.join(SAMPLE_KEYS), ', '.join(map(str, unknown))))
            if 'file' not in doc:
                raise ValueError("Sample document {} has no 'file'".format(doc))
            samples.append(doc)

    argsList = []
    for longArg, val in defaults.items():
        if longArg == 'yaml':
            raise Exception("YAMLception not allowed! Offending line: {}:{}".format(longArg, val))
        if longArg in ('files', 'names'):
            raise ValueError("'{}' cannot be set in 'defaults', list the samples as separate documents"
                             .format(longArg))
        # some key has no value (e.g. strict is a 'boolean' flag)
        if val is False:
            continue
        argsList.append('--' + str(longArg))
        if val is not None and val is not True:
            argsList.append(str(val))

    if samples:
        argsList.append('--files')
        argsList += [str(s['file']) for s in samples]
        argsList.append('--names')
        argsList += [str(s['name']) if s.get('name') is not None else inferSampleName(str(s['file']))
                     for s in samples]
    return argsList
