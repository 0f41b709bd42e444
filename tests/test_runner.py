'''Command line

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.
'''

import hashlib

import yaml
from click.testing import CliRunner

from memocache.common.keys import canonicalKey
from memocache.common.memo_config import MemoConfig
from memocache.runner import main


def test_commands_are_registered():
    assert {'init', 'key', 'fib', 'bench'} <= set(main.commands)


def test_fib(configPath):
    result = CliRunner().invoke(main, ['fib', '10'])
    assert result.exit_code == 0, result.output
    assert 'fib(10) = 55' in result.output
    assert 'body invocations: 11' in result.output
    assert 'options: keyStrategy=canonical opaque=raise' in result.output


def test_fib_options_from_config(configPath):
    with open(configPath, 'w') as f:
        yaml.dump({'memoize': {'opaque': 'identity', 'bind_arguments': False}}, f)

    result = CliRunner().invoke(main, ['fib', '10'])
    assert result.exit_code == 0, result.output
    assert 'fib(10) = 55' in result.output
    assert 'opaque=identity' in result.output
    assert 'bindArguments=False' in result.output

    result = CliRunner().invoke(main, ['fib', '10', '--opaque', 'raise', '--bind_arguments'])
    assert result.exit_code == 0, result.output
    assert 'opaque=raise' in result.output
    assert 'bindArguments=True' in result.output


def test_fib_thread_safe(configPath):
    result = CliRunner().invoke(main, ['fib', '30', '--thread_safe'])
    assert result.exit_code == 0, result.output
    assert 'fib(30) = 832040' in result.output
    assert 'body invocations: 31' in result.output


def test_key_digest(configPath):
    runner = CliRunner()

    first = runner.invoke(main, ['key', '[{"x": 1, "y": 2}]'])
    second = runner.invoke(main, ['key', '[{"y": 2, "x": 1}]'])
    assert first.exit_code == 0, first.output
    assert first.output.strip() == second.output.strip()

    expected = hashlib.sha1(canonicalKey({'x': 1, 'y': 2})).hexdigest()
    assert first.output.strip() == expected


def test_key_raw(configPath):
    result = CliRunner().invoke(main, ['key', '[1]', '--kwargs', '{"b": 2}', '--raw'])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == canonicalKey(1, b=2).hex()


def test_key_invalid_json(configPath):
    result = CliRunner().invoke(main, ['key', '[1,'])
    assert result.exit_code != 0

    result = CliRunner().invoke(main, ['key', '{"a": 1}'])
    assert result.exit_code != 0


def test_init(configPath):
    result = CliRunner().invoke(main, ['init', '--path', str(configPath)])
    assert result.exit_code == 0, result.output
    assert configPath.exists()

    memoConfig = MemoConfig(str(configPath))
    assert memoConfig.getKeyStrategy() == 'canonical'


def test_bench(configPath):
    result = CliRunner().invoke(main, ['bench', '12', '--repeat', '1'])
    assert result.exit_code == 0, result.output
    assert 'naive' in result.output
    assert 'memoized (canonical)' in result.output
    assert 'RSS' in result.output
    assert 'cache: 13 entries' in result.output


def test_bench_options(configPath):
    result = CliRunner().invoke(
        main, ['bench', '12', '--repeat', '1', '--no_naive', '--strategy', 'native', '--thread_safe'])
    assert result.exit_code == 0, result.output
    assert 'memoized (native)' in result.output
    assert 'threadSafe=True' in result.output
