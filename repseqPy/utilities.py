import sys
import math
import functools
import importlib

from multiprocessing import cpu_count

from repseqPy.logger import printto, LEVEL


def capThreads(requested, tasks, stream=None):
    """
    caps the number of worker processes to the number of independent tasks and
    to 80% of the available CPUs (at least one worker is always allowed)

    :param requested: int
                number of processes requested by the user

    :param tasks: int
                number of independent tasks that will be distributed to the workers

    :param stream: logging stream

    :return: int, number of workers to spawn

    >>> capThreads(4, 1)
    1
    >>> capThreads(1, 100)
    1
    >>> capThreads(0, 10)
    1
    """
    threads = max(1, min(requested, tasks))
    availCPUs = cpu_count()
    if availCPUs and threads > availCPUs:
        # only use 80% of max CPU please
        cappedCPU = max(1, int(math.floor(availCPUs * 0.8)))
        printto(stream, "Detected {} available CPUs but {} processes were requested. "
                        "Capping total processes to {}.".format(availCPUs, threads, cappedCPU), LEVEL.WARN)
        threads = cappedCPU
    return threads


def requires(package, fatal=False, stderr=sys.stderr):
    """
    a decorator that will NOT call the function if the requirements are not fulfilled. i.e. ALL packages specified in
    package MUST be importable. Importable is defined as a non-throwing importlib.import_module(package_name).

    if fatal is specified, and one of the packages cannot be imported, then an ImportError will be raised

    :param package: string, list, or tuple of package names.
                packages are case sensitive

    :param fatal: bool
                should a failure to import any of the package result in an exception?

    :param stderr: output stream.
                prints a message for the first un-importable package

    :return: Not applicable.

    >>> # function is called because os and sys is detected
    >>> @requires(['os', 'sys'])
    ... def foo(message):
    ...     return message
    ...
    >>> foo("No problemo")
    'No problemo'

    >>> # function is not called because ssys is not found (raise ImportError exception because it's fatal)
    >>> @requires(['os', 'ssys'], fatal=True)
    ... def foobar():
    ...     return "This function won't even be called"
    >>> with raises(ImportError):
    ...     foobar()
    """
    if isinstance(package, str):
        packages = [package]
    elif isinstance(package, (list, tuple)):
        packages = package
    else:
        raise TypeError(str(package) + " is not a valid type. Expecting a string, list, or tuple.")

    def _decorator(func):
        def _hasPackage():
            for p in packages:
                try:
                    importlib.import_module(p)
                except ImportError:
                    if fatal:
                        raise ImportError("{} is a required package for {} but is not found."
                                          .format(p, func.__name__))
                    return False
            return True

        @functools.wraps(func)
        def _call(*args, **kwargs):
            if _hasPackage():
                return func(*args, **kwargs)
            else:
                print("one of '{}' cannot be found in your python path. "
                      "Skipping '{}' function call which depends on it."
                      .format(package, func.__name__), file=stderr)
        return _call
    return _decorator
