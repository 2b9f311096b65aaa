"""
Sources of the data files to be uploaded to Zenodo
"""
import os
from abc import ABCMeta, abstractmethod
from collections.abc import Mapping

from .exceptions import ConfigurationError

class UploadFile:
    """
    a file to be uploaded to Zenodo, identified by the name it should have in the deposition
    and the local path to its contents.
    """

    def __init__(self, filename: str, path: str):
        """
        :param str filename:  the name the file should be given in Zenodo
        :param str     path:  the path to the file on local disk
        """
        if not filename:
            filename = os.path.basename(path)
        self.filename = filename
        self.path = path

    @property
    def size(self) -> int:
        """
        the size of the file in bytes
        """
        return os.path.getsize(self.path)

    def open(self):
        """
        open the file for reading its bytes.  The caller is responsible for closing it.
        """
        return open(self.path, 'rb')

    def __repr__(self):
        return f"UploadFile({self.filename!r}, {self.path!r})"

class FileSource(metaclass=ABCMeta):
    """
    an interface for looking up the file to upload by a field identifier
    """

    @abstractmethod
    def get(self, field: str) -> UploadFile:
        """
        return the file supplied under the given field identifier, or None if no file was
        supplied for it.
        """
        raise NotImplementedError()

class LocalFileSource(FileSource):
    """
    a FileSource that serves files from local disk, given a mapping of field identifiers to
    file paths.
    """

    def __init__(self, files: Mapping=None):
        """
        :param Mapping files:  a dictionary whose keys are field identifiers and whose values are
                               either a file path or a 2-tuple of the upload filename and file path.
        """
        self._files = {}
        for field, spec in (files or {}).items():
            self.add(field, spec)

    def add(self, field: str, spec):
        """
        register a file under a field identifier.
        :param str field:  the field identifier
        :param str|tuple spec:  a file path or a 2-tuple of the upload filename and file path.
        """
        if isinstance(spec, (tuple, list)):
            filename, path = spec
        else:
            filename, path = None, spec
        self._files[field] = UploadFile(filename, path)

    def get(self, field: str) -> UploadFile:
        """
        return the file registered under the given field identifier, or None if there is none.
        :raises ConfigurationError:  if the registered file does not exist
        """
        out = self._files.get(field)
        if out is None or not out.filename:
            return None
        if not os.path.isfile(out.path):
            raise ConfigurationError(f"{field}: file to upload not found: {out.path}")
        return out
