import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional, Union

logger = logging.getLogger(__name__)


class _Blob:
    __slots__ = ('_data',)

    def __init__(self, data: Union[bytes, bytearray]):
        self._data = bytes(data)

    def __bytes__(self):
        return self._data

    def __len__(self):
        return len(self._data)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._data == other._data

    def __hash__(self):
        return hash((type(self), self._data))

    def __repr__(self):
        return f'<{type(self).__name__} {len(self._data)} bytes>'

    def bytes(self) -> bytes:
        return self._data


class State(_Blob):
    """Serialized terraform state. The content is opaque to tfexec."""


class Plan(_Blob):
    """Saved terraform plan file. The content is opaque to tfexec."""


@contextmanager
def temp_file(blob: Optional[Union[_Blob, bytes]] = None, name: str = 'terraform.tfstate') -> Iterator[str]:
    """
    Yield the path of a temporary file holding blob.

    The file is placed in its own temporary directory, which is removed on
    exit together with anything terraform wrote next to the file (backups,
    lock info). With blob None an empty path is reserved for terraform to
    write into.

    :param blob: State, Plan or raw bytes to write.
    :param name: File name inside the temporary directory.
    """
    tmpdir = tempfile.mkdtemp(prefix='tfexec-')
    path = os.path.join(tmpdir, name)
    try:
        if blob is not None:
            with open(path, 'wb') as f:
                f.write(bytes(blob))
        logger.debug('created temporary file %s', path)
        yield path
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)
        logger.debug('removed temporary file %s', path)


def read_blob(path: str, cls=State):
    """Read path back into a blob of type cls. Returns None if terraform did not write it."""
    if not os.path.exists(path):
        return None
    with open(path, 'rb') as f:
        return cls(f.read())
