'''Print the cache key derived from a call

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.

Useful to check whether two argument lists collide.
'''

import hashlib

import click
import rapidjson as json

from memocache.common.keys import UnsupportedArgumentError, canonicalKey


def parseJson(value, expectedType, name):
    try:
        data = json.loads(value)
    except ValueError as e:
        raise click.BadParameter(f'invalid json: {e}', param_hint=name)

    if not isinstance(data, expectedType):
        raise click.BadParameter(
            f'expected a json {expectedType.__name__}', param_hint=name)

    return data


@click.command()
@click.argument('args', default='[]')
@click.option('--kwargs', default='{}', help='keyword arguments, as a json object')
@click.option('--raw', is_flag=True, help='print the full key instead of a digest')
def key(args, kwargs, raw):
    '''Print the canonical cache key of a call

    \b
    memocache key '[1, {"x": 1, "y": 2}]'
    \b
    memocache key '[1]' --kwargs '{"b": 2}'
    '''
    positional = parseJson(args, list, 'args')
    keywords = parseJson(kwargs, dict, 'kwargs')

    try:
        derived = canonicalKey(*positional, **keywords)
    except UnsupportedArgumentError as e:
        raise click.ClickException(str(e))

    if raw:
        print(derived.hex())
    else:
        print(hashlib.sha1(derived).hexdigest())
