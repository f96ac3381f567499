import pytest

from tfexec import MockCommand, State
from tfexec.exceptions import TerraformCommandError


class TestTerraformCLIImport:
    def test_import(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'import', '-input=false', 'aws_instance.foo', 'i-1234']))
        assert cli.import_resource('aws_instance.foo', 'i-1234', '-input=false') is None

    def test_import_with_state(self, make_cli):
        def write_state(argv):
            path = argv[2][len('-state='):]
            with open(path, 'ab') as f:
                f.write(b' imported')

        cli = make_cli(MockCommand(
            args_re=r'^terraform import -state=\S+ -input=false aws_instance.foo i-1234$',
            callback=write_state,
        ))
        got = cli.import_resource('aws_instance.foo', 'i-1234', '-input=false', state=State(b'dummy state'))
        assert got == State(b'dummy state imported')

    def test_import_failed(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'import', 'aws_instance.foo', 'i-1234'], exit_code=1))
        with pytest.raises(TerraformCommandError):
            cli.import_resource('aws_instance.foo', 'i-1234')
