"""
Support for depositing data files and their descriptions into Zenodo.

The :py:class:`~zenodeposit.workflow.DepositionWorkflow` drives the sequence of REST calls needed 
to publish a new record (or a new version of an existing record) while the 
:py:class:`~zenodeposit.metadata.MetadataBuilder` turns the descriptive fields of a 
:py:class:`~zenodeposit.metadata.RecordDraft` into the metadata document Zenodo expects.
"""
from .exceptions import (DepositException, ConfigurationError, RemoteServiceError, ProtocolError,
                         UploadError, PreconditionError, TransportError)
from .metadata import RecordDraft, MetadataBuilder
from .files import UploadFile, FileSource, LocalFileSource
from .workflow import DepositionWorkflow, PRODUCTION_URL, SANDBOX_URL

try:
    from .version import __version__
except ImportError:
    __version__ = "(unset)"

system_name = "Zenodo Deposition Client"
system_abbrev = "zenodeposit"
