class TfExecError(Exception):
    pass


class TerraformConfigError(TfExecError):
    pass


class TerraformCommandError(TfExecError):
    """Raised when a terraform command returns a non-zero exit status.

    Attributes:
      retcode, cmd, stdout, stderr
    """
    def __init__(self, retcode, cmd, stdout=None, stderr=None):
        self.retcode = retcode
        self.cmd = cmd
        self.stdout = stdout
        self.stderr = stderr

    def __str__(self):
        msg = f'Command {self.cmd!r} returned non-zero exit status {self.retcode}.'
        if self.stderr:
            msg = f'{msg}\n{self.stderr.rstrip()}'
        return msg


class TerraformLaunchError(TfExecError):
    """Raised when the terraform process cannot be started at all,
    e.g. the binary is missing or not executable.
    """
    def __init__(self, cmd, reason):
        self.cmd = cmd
        self.reason = reason

    def __str__(self):
        return f'Failed to launch {self.cmd!r}: {self.reason}'


class TerraformCancelledError(TfExecError):
    """Raised when a running command is killed because it timed out or
    was cancelled explicitly. ``timeout`` is None for explicit cancellation.
    """
    def __init__(self, cmd, timeout=None):
        self.cmd = cmd
        self.timeout = timeout

    def __str__(self):
        if self.timeout is None:
            return f'Command {self.cmd!r} was cancelled.'
        return f'Command {self.cmd!r} timed out after {self.timeout} seconds.'


class TerraformParseError(TfExecError):
    """Raised when the output of a command has an unexpected format."""
    def __init__(self, output, reason):
        self.output = output
        self.reason = reason

    def __str__(self):
        return f'{self.reason}: {self.output!r}'


class TerraformOptionConflictError(TfExecError):
    """Raised when an option injected for a temporary file is also given by the caller.

    The assembled command is kept in ``cmd`` and contains both flags.
    """
    def __init__(self, cmd, option):
        self.cmd = cmd
        self.option = option

    def __str__(self):
        return (f'The {self.option} option cannot be set together with the value it replaces: '
                f'{self.cmd!r}')
