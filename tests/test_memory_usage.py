'''Copyright (c) 2018-2020 Machine Zone, Inc. All rights reserved.'''

import psutil

from memocache.common.algorithm import makeMemoizedFibonacci
from memocache.common.memory_usage import (
    getCacheFootprint,
    getMemoryLimit,
    getProcessUsedMemory,
    readCgroupLimit,
)


def test_memory_usage():
    assert getProcessUsedMemory() > 0

    limit = getMemoryLimit()
    assert 0 < limit <= psutil.virtual_memory().total

    hits = getMemoryLimit.cacheInfo().hits
    assert getMemoryLimit() == limit
    assert getMemoryLimit.cacheInfo().hits == hits + 1


def test_cgroup_limits(tmp_path):
    v2 = tmp_path / 'memory.max'
    v1 = tmp_path / 'memory.limit_in_bytes'
    missing = tmp_path / 'missing'

    assert readCgroupLimit(str(missing)) is None

    v2.write_text('max\n')
    assert readCgroupLimit(str(v2)) is None

    v1.write_text('1048576\n')
    assert readCgroupLimit(str(v1)) == 1048576

    # An unlimited v2 group falls through to the v1 file
    assert getMemoryLimit((str(v2), str(v1))) == 1048576

    total = psutil.virtual_memory().total
    assert getMemoryLimit((str(missing),)) == total

    v1.write_text(str(total * 4))
    assert getMemoryLimit((str(v1), str(missing))) == total


def test_cache_footprint():
    fib, _ = makeMemoizedFibonacci()
    empty = getCacheFootprint(fib)
    assert empty > 0

    fib(20)
    assert len(fib) == 21
    assert getCacheFootprint(fib) > empty
