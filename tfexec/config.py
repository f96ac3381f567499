import os
from typing import Mapping, Optional

from tfexec.exceptions import TerraformConfigError

DEFAULT_EXEC_PATH = 'terraform'
EXEC_PATH_ENV = 'TFEXEC_PATH'
TIMEOUT_ENV = 'TFEXEC_TIMEOUT'


class TerraformConfig:
    """Settings of the terraform binary invocation.

    Explicit arguments take precedence over the environment variables
    TFEXEC_PATH and TFEXEC_TIMEOUT.
    """

    __slots__ = ('exec_path', 'timeout')

    def __init__(self, exec_path: str = None, timeout: float = None):
        self.exec_path = exec_path or DEFAULT_EXEC_PATH
        self.timeout = _parse_timeout(timeout)

    def __repr__(self):
        return f'<TerraformConfig exec_path={self.exec_path!r} timeout={self.timeout!r}>'

    @classmethod
    def from_env(
            cls,
            environ: Optional[Mapping[str, str]] = None,
            exec_path: str = None,
            timeout: float = None,
    ) -> 'TerraformConfig':
        """
        Build config from environment variables.

        :param environ: Mapping to read from. Defaults to os.environ.
        :param exec_path: Path of terraform binary, overrides TFEXEC_PATH.
        :param timeout: Seconds to wait for each command, overrides TFEXEC_TIMEOUT.
        """
        environ = os.environ if environ is None else environ
        if exec_path is None:
            exec_path = environ.get(EXEC_PATH_ENV) or None
        if timeout is None:
            timeout = environ.get(TIMEOUT_ENV) or None
        return cls(exec_path=exec_path, timeout=timeout)


def _parse_timeout(value) -> Optional[float]:
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise TerraformConfigError(f'Invalid timeout {value!r}, expected a number of seconds.') from None
    if timeout <= 0:
        raise TerraformConfigError(f'Invalid timeout {value!r}, expected a positive number of seconds.')
    return timeout
