import re
from typing import Union

from packaging.version import InvalidVersion, Version

from tfexec.exceptions import TerraformParseError

# Terraform v0.12.28
# OpenTofu v1.6.0
_VERSION_RE = re.compile(r'^\s*(?:terraform|opentofu)\s+v?(\S+)', re.IGNORECASE)


def parse_version(stdout: str) -> Version:
    """
    Parse the output of `terraform version`.

    Only the first line is looked at, so the notices printed after it
    (out of date warnings, provider versions) are ignored.
    """
    lines = stdout.splitlines()
    first = lines[0] if lines else ''
    match = _VERSION_RE.match(first)
    if not match:
        raise TerraformParseError(stdout, 'Failed to find terraform version')
    try:
        return Version(match.group(1))
    except InvalidVersion:
        raise TerraformParseError(stdout, f'Failed to parse terraform version {match.group(1)!r}') from None


def truncate_pre_release_version(version: Union[str, Version]) -> Version:
    """
    Drop the pre-release part of version, e.g. 1.6.0-rc1 -> 1.6.0.

    Pre-release versions sort before their release, so constraints like
    ">= 1.6" would reject 1.6.0-rc1 unless it is truncated first.
    """
    if not isinstance(version, Version):
        try:
            version = Version(version)
        except InvalidVersion:
            raise TerraformParseError(version, 'Failed to parse version') from None
    if not version.is_prerelease:
        return version
    return Version(version.base_version)
