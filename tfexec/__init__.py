__version__ = '0.1.0'

from .cli import TerraformCLI
from .config import TerraformConfig
from .executor import CommandResult, Executor, SubprocessExecutor
from .mock import MockCommand, MockExecutor
from .state import Plan, State

__all__ = [
    'TerraformCLI',
    'TerraformConfig',
    'CommandResult',
    'Executor',
    'SubprocessExecutor',
    'MockCommand',
    'MockExecutor',
    'Plan',
    'State',
]
