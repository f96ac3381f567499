import logging
import os
import shutil
import subprocess
import threading
import time
from typing import List, Mapping, Optional, Sequence

from tfexec.exceptions import TerraformCancelledError, TerraformLaunchError

logger = logging.getLogger(__name__)


class CommandResult:
    __slots__ = ('cmd', 'retcode', 'stdout', 'stderr')

    def __init__(self, cmd, retcode, stdout='', stderr=''):
        self.cmd = cmd
        self.retcode = retcode
        self.stdout = stdout
        self.stderr = stderr

    def __repr__(self):
        return f'<CommandResult cmd={self.cmd!r} retcode={self.retcode!r}>'


class Executor:
    """Runs a command and returns its outputs.

    Implementations must return a CommandResult whatever the exit status is;
    deciding whether a non-zero status is an error is up to the caller.
    """

    def run(
            self,
            argv: Sequence[str],
            cwd: str = None,
            env: Mapping[str, str] = None,
            timeout: float = None,
    ) -> CommandResult:
        raise NotImplementedError

    def cancel(self):
        """Abort the command currently running, if any."""


class SubprocessExecutor(Executor):
    """Executor spawning a real process for each command.

    :param cwd: Default working directory of the process.
    :param env: Environment variables merged over os.environ.
    :param poll_interval: Seconds between checks for cancellation.
    """

    def __init__(self, cwd: str = None, env: Mapping[str, str] = None, poll_interval: float = 0.1):
        self.cwd = cwd
        self.env = dict(env) if env else {}
        self.poll_interval = poll_interval
        self._cancelled = threading.Event()

    def __repr__(self):
        return f'<SubprocessExecutor cwd={self.cwd!r}>'

    def run(
            self,
            argv: Sequence[str],
            cwd: str = None,
            env: Mapping[str, str] = None,
            timeout: float = None,
    ) -> CommandResult:
        """
        Run argv and wait for it to exit.

        The process is killed and TerraformCancelledError raised when timeout
        seconds elapse or cancel() is called from another thread. A cancel()
        issued before run() starts has no effect.

        :param argv: Program name followed by its arguments.
        :param cwd: Working directory, overrides the executor default.
        :param env: Extra environment variables for this call only.
        :param timeout: Seconds to wait before killing the process.
        """
        argv = list(argv)
        cwd = cwd if cwd is not None else self.cwd
        merged_env = {**os.environ, **self.env, **(env or {})}
        program = shutil.which(argv[0], path=merged_env.get('PATH')) or argv[0]

        logger.debug('[executor@%s]$ %s', cwd or '.', ' '.join(argv))
        self._cancelled.clear()
        try:
            proc = subprocess.Popen(
                [program] + argv[1:],
                cwd=cwd,
                env=merged_env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding='utf-8',
                errors='replace',
            )
        except OSError as e:
            logger.warning('failed to launch %s: %s', argv[0], e)
            raise TerraformLaunchError(argv, e) from e

        with proc:
            stdout, stderr = self._communicate(proc, argv, timeout)

        if proc.returncode != 0:
            logger.warning('[executor@%s] exit status %d: %s', cwd or '.', proc.returncode, stderr.rstrip())
        return CommandResult(argv, proc.returncode, stdout, stderr)

    def cancel(self):
        self._cancelled.set()

    def _communicate(self, proc: subprocess.Popen, argv: List[str], timeout: Optional[float]):
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            wait = self.poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    self._kill(proc, argv)
                    raise TerraformCancelledError(argv, timeout)
                wait = min(wait, remaining)
            try:
                return proc.communicate(timeout=wait)
            except subprocess.TimeoutExpired:
                if self._cancelled.is_set():
                    self._kill(proc, argv)
                    raise TerraformCancelledError(argv) from None

    @staticmethod
    def _kill(proc: subprocess.Popen, argv: List[str]):
        logger.warning('killing %s (pid %d)', argv[0], proc.pid)
        proc.kill()
        proc.communicate()
