'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

import os


# ==========================================
#           REPSEQ's VERSION
# ==========================================

REPSEQROOT = os.path.abspath(os.path.dirname(__file__))
VERSION = '0.1.0'


# ==========================================
#           REPSEQ's DEFAULT SETTINGS
# ==========================================
DEFAULT_TASK = 'all'
DEFAULT_NAME = 'repseq'
DEFAULT_THREADS = 1
DEFAULT_TOP_CLONE_VALUE = '100'

# column names of a per-sample clonotype table (VDJtools format), keyed by the name used internally
DEFAULT_COLUMNS = {
    'count': 'count',
    'cdr3aa': 'cdr3aa',
    'v': 'v'
}

# columns of the unified clonotype record table
RECORD_COLUMNS = ['sample', 'v', 'cdr3aa', 'count', 'freq']

# clonotype identity within a sample
CLONOTYPE_KEY = ['v', 'cdr3aa']


# ====================================================================================
#           SEGMENT USAGE SMOOTHING
# ====================================================================================
# smoothed fraction = (clonotypes with segment + USAGE_PSEUDOCOUNT) / (clonotypes in sample + USAGE_PSEUDOTOTAL)
USAGE_PSEUDOCOUNT = 0.5
USAGE_PSEUDOTOTAL = 1.0


# ====================================================================================
#           VDJdb (REFERENCE DATABASE) SETTINGS
# ====================================================================================
DEFAULT_SPECIES = 'HomoSapiens'
DEFAULT_GENE = 'TRB'
DEFAULT_MHC_CLASS = 'MHCI'

# column names of a VDJdb-like table, keyed by the name used internally
VDJDB_COLUMNS = {
    'cdr3': 'cdr3',
    'epitope': 'antigen.epitope',
    'mhc': 'mhc.a',
    'antigenSpecies': 'antigen.species',
    'species': 'species',
    'gene': 'gene',
    'mhcClass': 'mhc.class'
}

# self-similarity of a sample, placed on the diagonal of the overlap matrix
SELF_OVERLAP = 1.0

# seconds to wait on the overlap results queue before checking that workers are still alive
RESULT_POLL_SECONDS = 1


# directory naming
AUX_FOLDER = 'auxiliary'
DIVERSITY_FOLDER = 'diversity'
USAGE_FOLDER = 'usage'
OVERLAP_FOLDER = 'overlap'
ANNOTATION_FOLDER = 'annotation'
