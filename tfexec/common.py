import os
from typing import Iterable, List, Optional

# ===================================================================
# OS constants
# ===================================================================

WINDOWS = os.name == 'nt'

# ===================================================================
# utils
# ===================================================================


def build_options(options: Optional[dict]) -> List[str]:
    """
    Convert keyword options to terraform command line flags.

    Each key in options should be snake format, and will be convert to command option key automatically.
        ex. no_color will be converted to -no-color.
    Each value in options will be converted to appropriate command value automatically.
    The conversion rules for values are as follows:
        None will be skipped.
        value ... will be regarded as flag option.
            ex. {"json": ...} -> -json
        boolean value will be converted to lower boolean.
            ex. {"backend": True} -> -backend=true
        list value will be converted to multi pairs.
            ex. {"var": ["Name1=xx", "Name2=xx"]} -> -var=Name1=xx -var=Name2=xx
        dict value will be converted to multi key value pairs.
            ex. {"var": {"Name1": "xx"}} -> -var=Name1=xx
    """
    argv = []
    if not options:
        return argv
    for option, value in options.items():
        if value is None:
            continue
        if '_' in option:
            option = option.replace('_', '-')
        if value is ...:
            argv += [f'-{option}']
            continue
        if isinstance(value, (list, tuple)):
            for val in value:
                argv += [f'-{option}={val}']
            continue
        if isinstance(value, dict):
            for k, v in value.items():
                argv += [f'-{option}={k}={v}']
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        argv += [f'-{option}={value}']
    return argv


def split_lines(string: str) -> List[str]:
    """Split output into non-empty lines, keeping their order."""
    if not string:
        return []
    return [line for line in string.splitlines() if line]


def has_prefix_option(opts: Iterable[str], prefix: str) -> bool:
    """
    Whether opts set the option of prefix, ex. "-state=".

    Both the "-state=foo" and the "-state", "foo" forms are detected, with
    one or two leading dashes as terraform accepts either.
    """
    name = prefix.rstrip('=')
    for opt in opts:
        if opt.startswith('--'):
            opt = opt[1:]
        if opt == name or opt.startswith(prefix):
            return True
    return False
