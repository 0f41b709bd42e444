'''Misc algorithm routines, used by the cli and the tests

Copyright (c) 2018-2020 Machine Zone, Inc. All rights reserved.
'''

import functools
import sys

from memocache.common.memoize import memoize

# Python frames used per level of a memoized recursion
FRAMES_PER_LEVEL = 8


def countCalls(f):
    '''Wrap f, the number of invocations is kept in wrapper.calls'''

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        wrapper.calls += 1
        return f(*args, **kwargs)

    wrapper.calls = 0
    return wrapper


def makeNaiveFibonacci():
    @countCalls
    def fib(n):
        if n < 2:
            return n
        return fib(n - 1) + fib(n - 2)

    return fib


def makeMemoizedFibonacci(**options):
    '''Return (memoized fib, counted body). The body recurses through the
    memoized entry point.'''

    @countCalls
    def body(n):
        if n < 2:
            return n
        return fib(n - 1) + fib(n - 2)

    fib = memoize(body, **options)
    return fib, body


def ensureRecursionLimit(depth):
    '''Raise the interpreter recursion limit for a recursion that deep'''

    needed = depth * FRAMES_PER_LEVEL + 100
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)
