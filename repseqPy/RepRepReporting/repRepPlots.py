'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''

import os
import numpy as np

from os.path import exists

from repseqPy.RepMultiRepertoire.PlotManager import PlotManager
from repseqPy.logger import printto, LEVEL
from repseqPy.utilities import requires

import matplotlib as mpl
mpl.use('Agg')  # Agg
import matplotlib.pyplot as plt
from matplotlib import cm


def plotDist(distribution, sampleName, filename, title='', proportion=True,
             rotateLabels=True, vertical=True, sortValues=True, top=15, stream=None):
    """
    bar plot of a distribution (dict class => count). The table is written into filename (.csv) and the
    figure next to it (.png) when python plotting is on.

    :param distribution: dict
    :param sampleName: string, used in the default title
    :param filename: string, path to the csv file
    :param title: string
    :param proportion: bool, label bars with proportions rather than raw counts
    :param rotateLabels: bool
    :param vertical: bool
    :param sortValues: bool, sort classes by decreasing count. Otherwise classes are sorted by name
    :param top: int, number of classes shown in the figure. All of them are written to the csv file
    :param stream: logging stream
    """
    if eitherExists(filename):
        printto(stream, "File found ... " + os.path.basename(filename), LEVEL.WARN)
        return

    if sortValues:
        classes = sorted(distribution, key=distribution.get, reverse=True)
    else:
        classes = sorted(distribution)

    allClasses = classes[:]
    if len(classes) > top:
        classes = classes[:top]
    if not vertical:
        classes = classes[::-1]
        allClasses = allClasses[::-1]
    total = sum(distribution.values()) * 1.0
    if total == 0:
        printto(stream, "Will not calculate {} because there is no distribution."
                .format(os.path.basename(filename.rstrip(os.sep))),
                LEVEL.WARN)
        return

    writeCSV(filename, "x,y,raw\n", "{},{},{}\n",
             [(x, distribution[x] / total * 100, distribution[x]) for x in allClasses],
             metadata=("vert" if vertical else "hori") + ",total=" + str(total) + "\n")

    if not PlotManager.pythonPlotOn():
        return

    stats = [distribution[x] / total * 100 for x in classes]
    ind = np.arange(len(classes))
    fig, ax = plt.subplots(figsize=(8, 5) if vertical else (5, 8))
    ax.grid()
    width = 0.4 if len(classes) > 10 else 0.6
    topvalFormat = '{:.2f}' if proportion else '{:,}'

    if vertical:
        rects = ax.bar(ind, stats, width)
        ax.set_xticks(ind)
        ax.set_ylim(top=max(stats) * 1.1)
        ax.set_xticklabels(classes, rotation=45 if rotateLabels else 0)
        ax.set_ylabel('Proportion (%)')
        # write the proportion on the top of each bar
        for rect in rects:
            height = rect.get_height()
            value = height if proportion else int(np.round(height * total / 100))
            ax.text(rect.get_x() + rect.get_width() / 2., 1.05 * height, topvalFormat.format(value),
                    ha='center', va='bottom', size=10, color='red')
    else:
        rects = ax.barh(ind, stats, width)
        ax.set_yticks(ind)
        ax.set_xlim(right=max(stats) * 1.1)
        ax.set_yticklabels(classes, rotation=45 if rotateLabels else 0)
        ax.set_xlabel('Proportion (%)')
        for rect in rects:
            width = rect.get_width()
            value = width if proportion else int(np.round(width * total / 100))
            ax.text(0.8 + width, rect.get_y() + rect.get_height() / 2., topvalFormat.format(value),
                    ha='center', va='bottom', size=10, color='red')

    if title == '':
        title = 'Distribution in Sample ' + sampleName
    title += '\nTotal is {:,}'.format(int(total))
    ax.set_title(title)
    plt.tight_layout()
    fig.savefig(filename.replace(".csv", ".png"), dpi=300)
    plt.close()


def plotVenn(sets, filename, title='', stream=None):
    """
    :param sets: dict, label => set. Only 2 or 3 sets can be drawn
    :param filename: string, path to the png file
    :param title: string
    :param stream: logging stream
    """
    if not PlotManager.pythonPlotOn():
        return
    if eitherExists(filename):
        printto(stream, "File found ... " + os.path.basename(filename), LEVEL.WARN)
        return
    if len(sets) not in (2, 3):
        printto(stream, "Venn diagram can only be generated for 2 or 3 samples, got {}".format(len(sets)),
                LEVEL.WARN)
        return
    _drawVenn(sets, filename, title)


@requires('matplotlib_venn')
def _drawVenn(sets, filename, title):
    fig, ax = plt.subplots()
    labels = list(sets.keys())
    values = [sets[k] for k in labels]
    if len(sets) == 2:
        from matplotlib_venn import venn2
        venn2(values, labels, ax=ax)
    else:
        from matplotlib_venn import venn3
        venn3(values, labels, ax=ax)
    ax.set_title(title)
    fig.savefig(filename, dpi=300)
    plt.close()


def plotHeatmapFromDF(df, filename, title=None, label=None, stream=None):
    """
    heatmap of a DataFrame, rows and columns are kept in their order. NaN cells are left blank.

    :param df: DataFrame
    :param filename: string, path to the png file
    :param title: string
    :param label: string, colorbar label
    :param stream: logging stream
    """
    if not PlotManager.pythonPlotOn():
        return
    if eitherExists(filename):
        printto(stream, "File found ... " + os.path.basename(filename), LEVEL.WARN)
        return

    values = np.ma.masked_invalid(df.values.astype(float))
    fig, ax = plt.subplots()
    cax = ax.pcolor(values, cmap=cm.Blues)
    fig.set_size_inches(11, 13)

    # turn off the frame
    ax.set_frame_on(False)
    if title:
        ax.set_title(title)

    # put the major ticks at the middle of each cell
    ax.set_yticks(np.arange(df.shape[0]) + 0.5, minor=False)
    ax.set_xticks(np.arange(df.shape[1]) + 0.5, minor=False)
    ax.set_yticks(np.arange(df.shape[0] + 1), minor=True)
    ax.set_xticks(np.arange(df.shape[1] + 1), minor=True)
    ax.set_xlim([0, df.shape[1]])
    ax.set_ylim([0, df.shape[0]])

    # want a more natural, table-like display
    ax.invert_yaxis()
    ax.xaxis.tick_top()

    fontsize = 'small' if len(df) > 20 else None
    ax.set_xticklabels(df.columns, minor=False, fontsize=fontsize, rotation=90)
    ax.set_yticklabels(df.index, minor=False, fontsize=fontsize)

    ax.grid(True, which='minor')

    # Turn off all the ticks
    ax.tick_params(axis='both', which='both', length=0)

    if values.count():
        fig.colorbar(cax, ticks=np.linspace(values.min(), values.max(), 5), label=label, orientation='horizontal')

    fig.savefig(filename, dpi=300)
    plt.close()


def plotClusteredHeatmap(df, link, filename, title=None, label=None, stream=None):
    """
    dendrogram of the rows of df (from a scipy linkage matrix) next to the heatmap of df with its
    rows in leaf order

    :param df: DataFrame
    :param link: linkage matrix of the rows of df, see scipy.cluster.hierarchy.linkage
    :param filename: string, path to the png file
    :param title: string
    :param label: string, colorbar label
    :param stream: logging stream
    """
    if not PlotManager.pythonPlotOn():
        return
    if eitherExists(filename):
        printto(stream, "File found ... " + os.path.basename(filename), LEVEL.WARN)
        return
    if link is None:
        printto(stream, "Clustered heatmap needs at least 2 samples, plotting the heatmap only", LEVEL.WARN)
        plotHeatmapFromDF(df, filename, title=title, label=label, stream=stream)
        return

    from scipy.cluster.hierarchy import dendrogram

    fig = plt.figure(figsize=(max(8, df.shape[1] * 0.3 + 3), max(5, df.shape[0] * 0.4 + 2)))
    axDendro = fig.add_axes([0.05, 0.1, 0.15, 0.75])
    tree = dendrogram(link, orientation='left', no_labels=True, ax=axDendro, color_threshold=0)
    axDendro.set_axis_off()

    # dendrogram leaves are drawn bottom up
    order = tree['leaves'][::-1]
    ordered = df.iloc[order]

    axHeat = fig.add_axes([0.22, 0.1, 0.6, 0.75])
    cax = axHeat.pcolor(ordered.values.astype(float), cmap=cm.Blues)
    axHeat.set_xticks(np.arange(ordered.shape[1]) + 0.5)
    axHeat.set_yticks(np.arange(ordered.shape[0]) + 0.5)
    axHeat.set_xticklabels(ordered.columns, rotation=90, fontsize='small')
    axHeat.set_yticklabels(ordered.index)
    axHeat.yaxis.tick_right()
    axHeat.invert_yaxis()
    axHeat.tick_params(axis='both', which='both', length=0)
    if title:
        axHeat.set_title(title)

    axBar = fig.add_axes([0.9, 0.1, 0.02, 0.75])
    fig.colorbar(cax, cax=axBar, label=label)
    fig.savefig(filename, dpi=300)
    plt.close()


def plotStackedBars(df, filename, title='', ylabel='Proportion', top=10, stream=None):
    """
    one bar per row of df, stacked by column. Only the top (by overall sum) columns are drawn,
    the remaining ones are pooled into 'other'.

    :param df: DataFrame, rows are samples and columns the stacked classes
    :param filename: string, path to the png file
    :param title: string
    :param ylabel: string
    :param top: int, number of classes drawn individually
    :param stream: logging stream
    """
    if not PlotManager.pythonPlotOn():
        return
    if eitherExists(filename):
        printto(stream, "File found ... " + os.path.basename(filename), LEVEL.WARN)
        return
    if df.empty:
        printto(stream, "Nothing to plot for " + os.path.basename(filename), LEVEL.WARN)
        return

    df = df.fillna(0)
    ranked = df.sum(axis=0).sort_values(ascending=False).index
    kept = df[list(ranked[:top])]
    if len(ranked) > top:
        kept = kept.assign(other=df[list(ranked[top:])].sum(axis=1))

    fig, ax = plt.subplots(figsize=(max(6, len(df) * 0.8 + 3), 6))
    kept.plot(kind='bar', stacked=True, ax=ax, colormap='tab20', width=0.7)
    ax.set_ylabel(ylabel)
    ax.set_xlabel('')
    ax.set_title(title)
    ax.legend(loc='center left', bbox_to_anchor=(1.0, 0.5), fontsize='small')
    plt.xticks(rotation=45, ha='right')
    plt.tight_layout()
    fig.savefig(filename, dpi=300)
    plt.close()


def writeCSV(filename, header, template, vals, metadata=""):
    """
    writes one line per tuple of vals, formatted by template, below the optional metadata line and the header.
    An existing file is left untouched.

    :param filename: path to the csv file
    :param header: string, header row
    :param template: format string of one row
    :param vals: iterable of tuples to unpack into template
    :param metadata: string written before the header [default=""]
    """
    assert ".csv" in filename
    if exists(filename):
        return
    with open(filename, "w") as fp:
        fp.write(metadata)
        fp.write(header + ("\n" if "\n" not in header else ""))
        for row in vals:
            fp.write(template.format(*row))


def writeTable(df, filename, index=True, stream=None):
    """
    writes a DataFrame to filename (csv) unless the file already exists

    :return: bool, True if the file was written
    """
    if exists(filename):
        printto(stream, "File found ... " + os.path.basename(filename), LEVEL.WARN)
        return False
    df.to_csv(filename, index=index)
    return True


def eitherExists(filename, originalExt='.png', exts=('.csv', '.csv.gz')):
    if exists(filename):
        return True
    # python should be plotting but .png isn't there
    if PlotManager.pythonPlotOn():
        return False

    # python isn't plotting. Check if either of the extensions are present
    for ex in exts:
        if exists(filename.replace(originalExt, ex)):
            return True
    return False
