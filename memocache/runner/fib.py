'''Memoized recursive fibonacci

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.
'''

import click

from memocache.common.algorithm import ensureRecursionLimit, makeMemoizedFibonacci
from memocache.common.keys import KEY_STRATEGIES, OPAQUE_POLICIES
from memocache.common.memo_config import (
    formatMemoizeOptions,
    getDefaultBindArguments,
    getDefaultKeyStrategy,
    getDefaultOpaquePolicy,
    getDefaultThreadSafe,
)


def withMemoizeOptions(func):
    '''The memoize() options shared by fib and bench, defaults from the config file'''

    options = [
        click.option('--strategy', type=click.Choice(KEY_STRATEGIES),
                     default=getDefaultKeyStrategy),
        click.option('--opaque', type=click.Choice(OPAQUE_POLICIES),
                     default=getDefaultOpaquePolicy),
        click.option('--thread_safe/--no_thread_safe', default=getDefaultThreadSafe),
        click.option('--bind_arguments/--no_bind_arguments',
                     default=getDefaultBindArguments),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def collectOptions(strategy, opaque, thread_safe, bind_arguments):
    return {
        'keyStrategy': strategy,
        'opaque': opaque,
        'threadSafe': thread_safe,
        'bindArguments': bind_arguments,
    }


@click.command()
@click.argument('n', type=click.IntRange(min=0))
@withMemoizeOptions
def fib(n, **kwargs):
    '''Compute fibonacci(n) through a memoized recursion

    \b
    memocache fib 10

    The identity strategy only hits when the very same int object comes
    back, which CPython guarantees for small ints only.
    '''
    ensureRecursionLimit(n)

    options = collectOptions(**kwargs)
    memoized, body = makeMemoizedFibonacci(**options)
    result = memoized(n)
    info = memoized.cacheInfo()

    print(f'fib({n}) = {result}')
    print(f'body invocations: {body.calls}')
    print(f'hits: {info.hits} misses: {info.misses} entries: {info.currsize}')
    print(f'options: {formatMemoizeOptions(options)}')
