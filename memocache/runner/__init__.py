'''Memocache main driver.
   Calls into sub commands like git.

Copyright (c) 2018-2020 Machine Zone, Inc. All rights reserved.

# flake8: noqa
'''

from pkgutil import walk_packages

import click
import coloredlogs

from memocache.common.atexit_profiler import SORT_KEYS, registerProfiler

LOGGING_FORMAT = '%(asctime)s %(levelname)s %(message)s'
coloredlogs.install(level='WARNING', fmt=LOGGING_FORMAT)


@click.option('--verbose', '-v', envvar='MEMOCACHE_VERBOSE', count=True)
@click.option('--profile', envvar='MEMOCACHE_PROFILE', is_flag=True)
@click.option('--profile_sort', type=click.Choice(SORT_KEYS), default='cumulative')
@click.option('--profile_all', is_flag=True, help='also list frames outside memocache')
@click.group()
@click.version_option(package_name='memocache')
def main(verbose, profile, profile_sort, profile_all):
    """\b
Memocache memoizes pure functions: repeated calls with identical
arguments return the stored result instead of recomputing it.
    """
    if verbose:
        level = 'INFO' if verbose == 1 else 'DEBUG'
        coloredlogs.install(level=level, fmt=LOGGING_FORMAT)

    if profile:
        registerProfiler(sortby=profile_sort, restriction=None if profile_all else 'memocache')


for loader, module_name, is_pkg in walk_packages(__path__, __name__ + '.'):
    module = __import__(module_name, globals(), locals(), ['__name__'])
    cmd = getattr(module, module_name.rsplit('.', 1)[-1])
    if isinstance(cmd, click.Command):
        main.add_command(cmd)
