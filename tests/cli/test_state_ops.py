import os

import pytest

from tfexec import MockCommand, State
from tfexec.exceptions import TerraformCommandError, TerraformOptionConflictError


def option_value(argv, prefix):
    for arg in argv:
        if arg.startswith(prefix):
            return arg[len(prefix):]
    raise AssertionError(f'{prefix} not found in {argv!r}')


class TestTerraformCLIStatePull:
    def test_state_pull(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'state', 'pull'], stdout='{"version": 4}\n'))
        assert cli.state_pull() == State(b'{"version": 4}\n')

    def test_state_pull_failed(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'state', 'pull'], exit_code=1))
        with pytest.raises(TerraformCommandError):
            cli.state_pull()


class TestTerraformCLIStatePush:
    def test_state_push(self, make_cli):
        paths = []

        def check(argv):
            paths.append(argv[-1])
            with open(argv[-1], 'rb') as f:
                assert f.read() == b'dummy state'

        cli = make_cli(MockCommand(args_re=r'^terraform state push -force \S+$', callback=check))
        cli.state_push(State(b'dummy state'), '-force')
        assert paths and not os.path.exists(paths[0])


class TestTerraformCLIStateMv:
    def test_state_mv(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'state', 'mv', '-dry-run', 'null_resource.foo', 'null_resource.bar']))
        assert cli.state_mv('null_resource.foo', 'null_resource.bar', '-dry-run') == (None, None)

    def test_state_mv_with_state_and_state_out(self, make_cli):
        def move(argv):
            with open(option_value(argv, '-state='), 'wb') as f:
                f.write(b'updated state')
            with open(option_value(argv, '-state-out='), 'wb') as f:
                f.write(b'updated state out')

        cli = make_cli(MockCommand(
            args_re=r'^terraform state mv -state=\S+ -state-out=\S+ -lock=false null_resource.foo null_resource.bar$',
            callback=move,
        ))
        got = cli.state_mv('null_resource.foo', 'null_resource.bar', '-lock=false',
                           state=State(b'dummy state'), state_out=State(b'dummy state out'))
        assert got == (State(b'updated state'), State(b'updated state out'))

    def test_state_mv_with_state_out_option(self, make_cli):
        cli = make_cli()
        with pytest.raises(TerraformOptionConflictError) as excinfo:
            cli.state_mv('a.b', 'a.c', '-state-out=foo.tfstate', state_out=State(b'dummy state'))
        assert excinfo.value.option == '-state-out='


class TestTerraformCLIStateRm:
    def test_state_rm(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'state', 'rm', '-dry-run', 'null_resource.foo', 'null_resource.bar']))
        assert cli.state_rm(['null_resource.foo', 'null_resource.bar'], dry_run=...) is None

    def test_state_rm_with_state(self, make_cli):
        def remove(argv):
            with open(option_value(argv, '-state='), 'wb') as f:
                f.write(b'updated state')

        cli = make_cli(MockCommand(args_re=r'^terraform state rm -state=\S+ null_resource.foo$', callback=remove))
        assert cli.state_rm(['null_resource.foo'], state=State(b'dummy state')) == State(b'updated state')

    def test_state_rm_failed(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'state', 'rm', 'null_resource.foo'], exit_code=1))
        with pytest.raises(TerraformCommandError):
            cli.state_rm(['null_resource.foo'])
