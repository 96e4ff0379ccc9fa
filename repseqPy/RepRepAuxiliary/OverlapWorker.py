'''
    Short description: Comparative Analysis of Immune Repertoire Sequencing (RepSeq) Samples
    Python Version: 3
    Changes log: check git commits.
'''


from multiprocessing import Process

from repseqPy.logger import printto, LEVEL


class OverlapWorker(Process):
    """
    computes the similarity of sample pairs taken from tasksQueue until it receives None.

    Each result is posted to resultsQueue as (pair, similarity, None), or (pair, None, error message)
    when the pair fails, so that the remaining pairs keep being processed.
    """
    def __init__(self, bySample, stream=None):
        super(OverlapWorker, self).__init__()
        self.bySample = bySample
        self.tasksQueue = None
        self.exitQueue = None
        self.resultsQueue = None
        self.stream = stream

    def run(self):
        # overlapAuxiliary imports this module
        from repseqPy.RepRepAuxiliary.overlapAuxiliary import computePairOverlap

        printto(self.stream, self.name + " process is now ready to start a new job ...")
        while True:
            nextTask = self.tasksQueue.get()
            if nextTask is None:
                printto(self.stream, self.name + " process has stopped.")
                self.exitQueue.put("exit")
                break
            try:
                self.resultsQueue.put((nextTask, computePairOverlap(self.bySample, nextTask), None))
            except Exception as e:
                printto(self.stream, "An error occurred while processing " + self.name + " error: {}".format(
                    str(e)
                ), LEVEL.ERR)
                self.resultsQueue.put((nextTask, None, str(e)))
                continue
        return
