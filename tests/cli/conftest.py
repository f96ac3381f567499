import os

import pytest

from tfexec import MockExecutor, SubprocessExecutor, TerraformCLI


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv('TFEXEC_PATH', raising=False)
    monkeypatch.delenv('TFEXEC_TIMEOUT', raising=False)


@pytest.fixture
def make_cli():
    def _make_cli(*mock_commands):
        return TerraformCLI(MockExecutor(mock_commands))
    return _make_cli


@pytest.fixture
def acc_cli(tmp_path):
    if os.environ.get('TFEXEC_ACC') != '1':
        pytest.skip('set TFEXEC_ACC=1 to run acceptance tests against a real terraform')
    return TerraformCLI(SubprocessExecutor(cwd=str(tmp_path)))
