"""
The plots that OBEY pythonPlotOn() = False are all figures of the reports:
    1) plotDist                 - spectratypes
    2) plotHeatmapFromDF        - overlap matrix
    3) plotClusteredHeatmap     - segment usage
    4) plotVenn                 - shared clonotypes of 2 or 3 samples
    5) plotStackedBars          - segment usage, antigen species and HLA composition
The tables (csv files) are always written regardless of pythonPlotOn().
"""


class PlotManager:
    """
    This class decides whether or not the python backend will be plotting anything (default = no).
    Reports only write their tables when plotting is off, so that figures can be produced by
    other tools from the same files.
    """
    _pythonPlotting = False

    def __init__(self, pythonPlotting=False):
        PlotManager._pythonPlotting = bool(pythonPlotting)

    @staticmethod
    def pythonPlotOn():
        return PlotManager._pythonPlotting
