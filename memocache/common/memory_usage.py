'''Process and cache memory usage, reported by `memocache bench`

Copyright (c) 2018-2020 Machine Zone, Inc. All rights reserved.

Caches only grow, so the interesting numbers are how much memory the
process holds next to how much it may hold.
'''

import sys

import psutil

from memocache.common.memoize import memoize

# cgroup v2 first, then v1
CGROUP_MEMORY_LIMITS = (
    '/sys/fs/cgroup/memory.max',
    '/sys/fs/cgroup/memory/memory.limit_in_bytes',
)


def readCgroupLimit(path):
    '''In bytes, None when the file is missing or there is no limit'''

    try:
        with open(path) as f:
            value = f.read().strip()
    except OSError:
        return None

    if value == 'max':
        return None

    return int(value)


@memoize
def getMemoryLimit(paths=CGROUP_MEMORY_LIMITS):
    '''In bytes, the container limit capped by the host memory'''

    total = psutil.virtual_memory().total

    for path in paths:
        limit = readCgroupLimit(path)
        if limit is not None:
            # cgroup v1 reports an unlimited group as a huge page aligned number
            return min(limit, total)

    return total


def getProcessUsedMemory():
    p = psutil.Process()
    return p.memory_info().rss


def getCacheFootprint(memoized):
    '''Bytes held by the table and its keys. Results are shared with the
    caller and are not counted.'''

    size = sys.getsizeof(memoized.cache)
    for key in memoized.cache:
        size += sys.getsizeof(key)

    return size
