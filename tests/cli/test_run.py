import pytest

from tfexec import MockCommand, MockExecutor, TerraformCLI
from tfexec.exceptions import TerraformCommandError, TerraformConfigError


class RecordingExecutor(MockExecutor):
    def __init__(self, commands):
        super().__init__(commands)
        self.timeouts = []

    def run(self, argv, cwd=None, env=None, timeout=None):
        self.timeouts.append(timeout)
        return super().run(argv, cwd=cwd, env=env, timeout=timeout)


class TestTerraformCLIRun:
    def test_run(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'fmt', '-check'], stdout='main.tf\n', exit_code=3))
        r = cli.run('fmt', '-check', check=False)
        assert r.retcode == 3
        assert r.stdout == 'main.tf\n'

    def test_run_invalid(self, make_cli):
        cli = make_cli(MockCommand(
            ['terraform', 'invalid'],
            stderr='Terraform has no command named "invalid".\n',
            exit_code=1,
        ))
        with pytest.raises(TerraformCommandError) as excinfo:
            cli.run('invalid')
        assert 'Terraform has no command named "invalid"' in str(excinfo.value)

    def test_run_unexpected_command(self, make_cli):
        cli = make_cli(MockCommand(['terraform', 'version']))
        with pytest.raises(AssertionError):
            cli.run('plan')

    def test_exec_path_from_env(self, monkeypatch):
        monkeypatch.setenv('TFEXEC_PATH', '/usr/local/bin/tofu')
        cli = TerraformCLI(MockExecutor([MockCommand(['/usr/local/bin/tofu', 'version'], stdout='OpenTofu v1.6.0\n')]))
        assert cli.exec_path == '/usr/local/bin/tofu'
        assert str(cli.version()) == '1.6.0'

    def test_timeout(self):
        executor = RecordingExecutor([MockCommand(['terraform', 'version'])] * 2)
        cli = TerraformCLI(executor, timeout=30)
        cli.run('version')
        cli.run('version', timeout=5)
        assert executor.timeouts == [30.0, 5]

    def test_invalid_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv('TFEXEC_TIMEOUT', 'soon')
        with pytest.raises(TerraformConfigError):
            TerraformCLI(MockExecutor())
