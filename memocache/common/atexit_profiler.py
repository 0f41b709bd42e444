'''cProfile report printed when the cli terminates

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.

The report goes to stderr so that the output of `memocache key` can still
be piped. By default only memocache frames are listed. Time spent in a
memoized function shows up under the __call__ of memoize.py.
'''

import atexit
import cProfile
import io
import pstats
import sys

SORT_KEYS = ('cumulative', 'tottime', 'ncalls')


def formatProfilerOutput(pr, sortby='cumulative', limit=30, restriction='memocache'):
    s = io.StringIO()
    ps = pstats.Stats(pr, stream=s).sort_stats(sortby)

    # pstats applies the filters in order: regex on the file name, then count
    amount = [restriction, limit] if restriction else [limit]
    ps.print_stats(*amount)
    return s.getvalue()


def reportProfilerOutput(pr, sortby='cumulative', limit=30, restriction='memocache',
                         stream=None):
    pr.disable()
    print(formatProfilerOutput(pr, sortby, limit, restriction), file=stream or sys.stderr)


def registerProfiler(sortby='cumulative', limit=30, restriction='memocache'):
    '''Enable profiling and register an atexit handler which will print
    profiling data when the app terminates.'''

    pr = cProfile.Profile()
    pr.enable()
    atexit.register(reportProfilerOutput, pr, sortby, limit, restriction)
    return pr
