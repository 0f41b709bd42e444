'''Compare a naive and a memoized recursion

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.
'''

import time

import click
import humanfriendly
import tabulate

from memocache.common.algorithm import (
    ensureRecursionLimit,
    makeMemoizedFibonacci,
    makeNaiveFibonacci,
)
from memocache.common.memo_config import formatMemoizeOptions
from memocache.common.memory_usage import (
    getCacheFootprint,
    getMemoryLimit,
    getProcessUsedMemory,
)
from memocache.runner.fib import collectOptions, withMemoizeOptions


def timeIt(makeFunction, n, repeat):
    '''Best wall time out of repeat cold runs'''

    best = None
    for _ in range(repeat):
        f, counted = makeFunction()

        start = time.perf_counter()
        result = f(n)
        duration = time.perf_counter() - start

        if best is None or duration < best:
            best = duration

    return result, f, counted.calls, best


@click.command()
@click.argument('n', type=click.IntRange(min=0), default=25)
@click.option('--repeat', type=click.IntRange(min=1), default=3)
@click.option('--naive/--no_naive', default=True, help='also time the naive recursion')
@withMemoizeOptions
def bench(n, repeat, naive, **kwargs):
    '''Time fibonacci(n), naive vs memoized

    \b
    memocache bench 25 --repeat 5
    '''
    ensureRecursionLimit(n)
    options = collectOptions(**kwargs)

    rows = [['function', 'result', 'calls', 'entries', 'best time']]

    if naive:
        def makeNaive():
            f = makeNaiveFibonacci()
            return f, f

        result, _, calls, best = timeIt(makeNaive, n, repeat)
        rows.append(['naive', result, calls, '-', humanfriendly.format_timespan(best)])

    def makeMemoized():
        return makeMemoizedFibonacci(**options)

    result, memoized, calls, best = timeIt(makeMemoized, n, repeat)
    rows.append([
        f'memoized ({options["keyStrategy"]})',
        result,
        calls,
        len(memoized),
        humanfriendly.format_timespan(best),
    ])

    print(tabulate.tabulate(rows, tablefmt="simple", headers="firstrow"))
    print()

    print(f'options: {formatMemoizeOptions(options)}')
    footprint = humanfriendly.format_size(getCacheFootprint(memoized))
    print(f'cache: {len(memoized)} entries, {footprint} of table and keys')

    rss = humanfriendly.format_size(getProcessUsedMemory())
    limit = humanfriendly.format_size(getMemoryLimit())
    print(f'RSS: {rss} / {limit}')
