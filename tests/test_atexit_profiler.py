'''Copyright (c) 2020 Machine Zone, Inc. All rights reserved.'''

import cProfile
import io

from memocache.common.algorithm import makeMemoizedFibonacci
from memocache.common.atexit_profiler import formatProfilerOutput, reportProfilerOutput


def profileFibonacci():
    fib, _ = makeMemoizedFibonacci()

    pr = cProfile.Profile()
    pr.enable()
    fib(15)
    pr.disable()
    return pr


def test_report_lists_memoized_calls():
    output = formatProfilerOutput(profileFibonacci())
    assert 'memoize.py' in output
    assert 'algorithm.py' in output


def test_report_restriction():
    pr = profileFibonacci()

    output = formatProfilerOutput(pr, sortby='ncalls', restriction='no_such_module')
    assert 'memoize.py' not in output

    output = formatProfilerOutput(pr, sortby='tottime', restriction=None)
    assert 'memoize.py' in output


def test_report_to_a_stream():
    stream = io.StringIO()
    reportProfilerOutput(profileFibonacci(), limit=5, stream=stream)
    assert 'function calls' in stream.getvalue()
