import re
from collections import deque
from typing import Callable, Iterable, List, Mapping, Sequence, Union

from tfexec.executor import CommandResult, Executor


class MockCommand:
    """An expected command and the canned result replayed for it.

    :param args: Expected argv, compared exactly.
    :param args_re: Pattern searched in the space-joined argv. Takes precedence
        over args, which is useful when argv contains temporary file paths.
    :param stdout: Canned stdout.
    :param stderr: Canned stderr.
    :param exit_code: Canned exit status.
    :param callback: Called with the actual argv before the result is returned,
        e.g. to inspect or rewrite temporary files the command refers to.
    """

    __slots__ = ('args', 'args_re', 'stdout', 'stderr', 'exit_code', 'callback')

    def __init__(
            self,
            args: Sequence[str] = None,
            args_re: Union[str, re.Pattern] = None,
            stdout: str = '',
            stderr: str = '',
            exit_code: int = 0,
            callback: Callable[[List[str]], None] = None,
    ):
        self.args = list(args) if args is not None else None
        self.args_re = re.compile(args_re) if isinstance(args_re, str) else args_re
        self.stdout = stdout
        self.stderr = stderr
        self.exit_code = exit_code
        self.callback = callback

    def __repr__(self):
        expected = self.args_re.pattern if self.args_re is not None else self.args
        return f'<MockCommand {expected!r} exit_code={self.exit_code!r}>'

    def matches(self, argv: List[str]) -> bool:
        if self.args_re is not None:
            return self.args_re.search(' '.join(argv)) is not None
        return self.args == argv


class MockExecutor(Executor):
    """Executor replaying MockCommand expectations in order.

    An unexpected command fails with AssertionError right away. Not safe for
    concurrent use.
    """

    def __init__(self, commands: Iterable[MockCommand] = (), cwd: str = None, env: Mapping[str, str] = None):
        self.cwd = cwd
        self.env = dict(env) if env else {}
        self.calls = []
        self._commands = deque(commands)

    def __repr__(self):
        return f'<MockExecutor pending={len(self._commands)} calls={len(self.calls)}>'

    def add(self, command: MockCommand):
        self._commands.append(command)

    @property
    def pending(self) -> List[MockCommand]:
        return list(self._commands)

    def run(
            self,
            argv: Sequence[str],
            cwd: str = None,
            env: Mapping[str, str] = None,
            timeout: float = None,
    ) -> CommandResult:
        argv = list(argv)
        if not self._commands:
            raise AssertionError(f'unexpected command, no more expectations: {argv!r}')
        expected = self._commands.popleft()
        if not expected.matches(argv):
            raise AssertionError(f'unexpected command: got {argv!r}, want {expected!r}')
        self.calls.append(argv)
        if expected.callback is not None:
            expected.callback(argv)
        return CommandResult(argv, expected.exit_code, expected.stdout, expected.stderr)

    def assert_all_consumed(self):
        if self._commands:
            raise AssertionError(f'expected commands were not run: {list(self._commands)!r}')
