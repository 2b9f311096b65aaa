"""
The workflows for publishing records to Zenodo.

A :py:class:`DepositionWorkflow` executes the ordered sequence of calls to Zenodo's deposition
API that are needed to either publish a new record (:py:meth:`~DepositionWorkflow.publish`) or
publish a new version of an existing one (:py:meth:`~DepositionWorkflow.create_new_version`).
Each step must succeed before the next is attempted; the first failure aborts the workflow with
an exception that names the failed step.  No step is retried, and nothing done by earlier steps
is undone (e.g. a failed upload leaves an unpublished draft in Zenodo).

A workflow instance drives the lifecycle of one record at a time and is not safe for use by
multiple threads; create separate instances to deposit independent records concurrently.
"""
import os, logging
from collections.abc import Mapping
from urllib.parse import quote

from .exceptions import ConfigurationError, RemoteServiceError, ProtocolError, UploadError, \
                        PreconditionError, TransportError
from .metadata import RecordDraft, MetadataBuilder
from .files import UploadFile, FileSource
from .transport import Transport, TransportResponse, RequestsTransport
from .config import get_access_token
from . import responses as resp

log = logging.getLogger(__name__)

PRODUCTION_URL = "https://zenodo.org/api/deposit/depositions"
SANDBOX_URL = "https://sandbox.zenodo.org/api/deposit/depositions"

DEFAULT_FILE_FIELD = "file"

# workflow step names, used in log and error messages
CREATE_STEP = "create deposition"
UPDATE_STEP = "update deposition metadata"
UPLOAD_STEP = "upload file"
PUBLISH_STEP = "publish deposition"
CHECK_STEP = "check existing deposition"
NEWVERSION_STEP = "create new version"
DETAILS_STEP = "get new version details"
BUCKET_STEP = "upload file to bucket"

class DepositionWorkflow:
    """
    a driver for depositing a record into Zenodo.

    The record's descriptive fields are set on the workflow's :py:attr:`draft`; the identifiers
    that Zenodo assigns (the deposition ID and, once published, the DOI) are recorded there as
    well.
    """

    def __init__(self, access_token: str=None, sandbox: bool=False, draft: RecordDraft=None,
                 transport: Transport=None, file_source: FileSource=None,
                 file_field: str=DEFAULT_FILE_FIELD, base_url: str=None):
        """
        create the workflow
        :param str access_token:  the Zenodo personal access token to authorize requests with
        :param bool     sandbox:  if True, deposit into the Zenodo sandbox service rather than
                                  production
        :param RecordDraft draft: the description of the record to deposit; if not provided, an
                                  empty draft will be created
        :param Transport transport:  the transport to send requests with; if not provided, a
                                  :py:class:`~zenodeposit.transport.RequestsTransport` is used
        :param FileSource file_source:  the source of the file to upload when one is not passed
                                  directly to :py:meth:`publish` or :py:meth:`create_new_version`
        :param str   file_field:  the field identifier to look up in ``file_source``
        :param str     base_url:  the depositions endpoint URL, over-riding the ``sandbox`` selection
        """
        self.access_token = access_token
        self.base_url = (base_url or (SANDBOX_URL if sandbox else PRODUCTION_URL)).rstrip('/')
        self.draft = draft if draft is not None else RecordDraft()
        self.transport = transport if transport is not None else RequestsTransport()
        self.file_source = file_source
        self.file_field = file_field

    @classmethod
    def from_config(cls, config: Mapping, draft: RecordDraft=None, transport: Transport=None,
                    file_source: FileSource=None):
        """
        create a workflow from a configuration dictionary (see :py:mod:`zenodeposit.config` for the
        supported properties).  Default descriptive fields given in the ``metadata`` property are
        applied to the draft, with values already set on a given ``draft`` taking precedence.
        :raises ConfigurationError:  if the ``metadata`` property contains unrecognized fields
        """
        if draft is None:
            draft = RecordDraft()
        mdconf = config.get('metadata') or {}
        if not isinstance(mdconf, Mapping):
            raise ConfigurationError("metadata config: not a dictionary: "+repr(mdconf))
        try:
            for name, val in mdconf.items():
                if name not in RecordDraft.FIELDS:
                    raise TypeError("unrecognized field name: "+name)
                if getattr(draft, name) is None:
                    setattr(draft, name, val)
        except TypeError as ex:
            raise ConfigurationError("metadata config: "+str(ex), cause=ex) from ex

        if transport is None:
            transport = RequestsTransport(config.get('timeout'), config.get('verify_ssl', True))

        return cls(get_access_token(config), config.get('sandbox', False), draft, transport,
                   file_source, config.get('file_field', DEFAULT_FILE_FIELD), config.get('base_url'))

    def close(self):
        """
        release the resources held by the workflow's transport
        """
        if hasattr(self.transport, 'close'):
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def deposition_id(self):
        """
        the identifier of the deposition currently being worked on, or None if one has not been
        created yet
        """
        return self.draft.deposition_id

    @property
    def doi(self) -> str:
        """
        the DOI assigned to the most recently published record, or None if nothing has been
        published yet
        """
        return self.draft.doi

    @property
    def doi_number(self) -> str:
        return self.draft.doi_number

    def build_metadata(self) -> Mapping:
        """
        return the metadata document describing the draft record
        """
        return MetadataBuilder(self.draft).build()

    def publish(self, upload: UploadFile=None) -> str:
        """
        create a new deposition describing the draft record, upload its file, and publish it.

        :param UploadFile upload:  the file to deposit; if not provided, it will be looked up
                                   from the file source.
        :return:  the DOI assigned to the published record
        :raises ConfigurationError:  if the access token is not set or no file is available
        :raises RemoteServiceError:  if Zenodo cannot be reached or responds with an error
        :raises ProtocolError:       if a Zenodo response is missing expected information
        :raises UploadError:         if Zenodo reports a failure in the file upload
        """
        self._check_token()
        if upload is None:
            upload = self._lookup_file()
        if upload is None:
            raise ConfigurationError("No file provided for upload to Zenodo")
        self._check_file(upload)

        log.info("Creating Zenodo deposition...")
        depid = str(self.create_deposition().id)
        self.draft.deposition_id = depid

        log.info("Updating Zenodo deposition metadata...")
        self.update_metadata(depid)

        log.info("Uploading %s (%d bytes) to Zenodo...", upload.filename, upload.size)
        self.upload_file(depid, upload)

        log.info("Publishing Zenodo deposition...")
        self.draft.doi = self.publish_deposition(depid).doi

        log.info("Published deposition %s with DOI %s", depid, self.draft.doi)
        return self.draft.doi

    def create_new_version(self, existing_deposition_id, upload: UploadFile=None) -> str:
        """
        publish a new version of a previously published record, described by the current
        state of the draft.  The new version's file replaces the previous one only if a file
        is provided (either directly or via the file source); otherwise, the new version
        retains the files of the previous version.

        :param existing_deposition_id:  the identifier of the published deposition to create a
                                   new version of
        :param UploadFile upload:  the new file to deposit
        :return:  the DOI assigned to the new version
        :raises ConfigurationError:  if the access token is not set or the file to upload is missing
        :raises PreconditionError:   if the existing deposition has not been published
        :raises RemoteServiceError:  if Zenodo cannot be reached or responds with an error
        :raises ProtocolError:       if a Zenodo response is missing expected information
        """
        self._check_token()
        if upload is None:
            upload = self._lookup_file()
        if upload is not None:
            self._check_file(upload)

        existing = self.get_deposition(existing_deposition_id, CHECK_STEP)
        if existing.state != 'done' and existing.published is None:
            raise PreconditionError(f"Cannot create new version: deposition {existing_deposition_id} "
                                    f"is not published yet. Current state: {existing.state}. "
                                    "Please publish the existing deposition first.", CHECK_STEP)

        log.info("Creating new version of deposition %s...", existing_deposition_id)
        newid = str(self.request_new_version(existing_deposition_id).draft_id)
        self.draft.deposition_id = newid

        newdraft = self.get_deposition(newid, DETAILS_STEP)

        if upload is not None:
            if not newdraft.bucket_url:
                raise ProtocolError(DETAILS_STEP, "links.bucket")
            log.info("Uploading %s (%d bytes) to Zenodo...", upload.filename, upload.size)
            self.upload_to_bucket(newdraft.bucket_url, upload)

        log.info("Updating Zenodo deposition metadata...")
        self.update_metadata(newid)

        log.info("Publishing Zenodo deposition...")
        self.draft.doi = self.publish_deposition(newid).doi

        log.info("Published new version %s with DOI %s", newid, self.draft.doi)
        return self.draft.doi

    def create_deposition(self) -> resp.Deposition:
        """
        create a new, empty deposition draft
        """
        res = self._call(CREATE_STEP, "POST", self.base_url, json={})
        return resp.as_deposition(resp.load_json(res.body, CREATE_STEP), CREATE_STEP)

    def get_deposition(self, depid, step: str=CHECK_STEP) -> resp.Deposition:
        """
        retrieve the current description of a deposition
        """
        res = self._call(step, "GET", self._dep_url(depid))
        return resp.as_deposition(resp.load_json(res.body, step), step)

    def update_metadata(self, depid) -> Mapping:
        """
        replace the metadata of a deposition draft with that built from the draft record
        :return:  the updated description of the deposition, as returned by Zenodo
        """
        res = self._call(UPDATE_STEP, "PUT", self._dep_url(depid),
                         json={"metadata": self.build_metadata()})
        try:
            return resp.load_json(res.body, UPDATE_STEP)
        except ProtocolError as ex:
            raise RemoteServiceError(UPDATE_STEP, res.status, res.body,
                                     "Failed to update Zenodo deposition metadata: " + str(ex),
                                     ex) from ex

    def upload_file(self, depid, upload: UploadFile) -> resp.FileUpload:
        """
        upload a file to a deposition draft as a multipart form field
        :raises UploadError:  if Zenodo's response reports an error
        """
        with self._open(UPLOAD_STEP, upload) as fd:
            res = self._call(UPLOAD_STEP, "POST", self._dep_url(depid) + "/files",
                             files={"file": (upload.filename, fd)})

        out = resp.as_file_upload(resp.load_json(res.body, UPLOAD_STEP), UPLOAD_STEP)
        if out.error:
            raise UploadError(UPLOAD_STEP, out.error, res.body)
        return out

    def publish_deposition(self, depid) -> resp.PublishedRecord:
        """
        publish a deposition draft
        """
        res = self._call(PUBLISH_STEP, "POST", self._dep_url(depid) + "/actions/publish")
        try:
            return resp.as_published(resp.load_json(res.body, PUBLISH_STEP), PUBLISH_STEP)
        except ProtocolError as ex:
            raise ProtocolError(PUBLISH_STEP, ex.field, res.body,
                                "Failed to publish deposition or retrieve DOI: " + str(ex)) from ex

    def request_new_version(self, depid) -> resp.NewVersion:
        """
        create a new draft version of a published deposition
        """
        res = self._send(NEWVERSION_STEP, "POST", self._dep_url(depid) + "/actions/newversion")
        if res.status >= 400:
            if res.status == 403:
                msg = f"Access forbidden for deposition {depid}. This could mean:\n" \
                      "- The deposition doesn't belong to your account\n" \
                      "- The access token lacks permissions\n" \
                      "- The deposition is not published yet"
            elif res.status == 404:
                msg = f"Deposition {depid} not found"
            elif res.status == 400:
                msg = f"Bad request for deposition {depid}: {res.body}"
            else:
                msg = f"Failed to create new version: {res.status} - {res.body}"
            raise RemoteServiceError(NEWVERSION_STEP, res.status, res.body, msg)

        return resp.as_new_version(resp.load_json(res.body, NEWVERSION_STEP), NEWVERSION_STEP)

    def upload_to_bucket(self, bucket_url: str, upload: UploadFile) -> Mapping:
        """
        upload a file's raw bytes into a deposition's storage bucket
        """
        url = bucket_url.rstrip('/') + '/' + quote(upload.filename, safe='')
        with self._open(BUCKET_STEP, upload) as fd:
            res = self._call(BUCKET_STEP, "PUT", url, data=fd,
                             headers={"Content-Type": "application/octet-stream"})
        return resp.load_json(res.body, BUCKET_STEP) if res.body else {}

    def _check_token(self):
        if not self.access_token:
            raise ConfigurationError("Zenodo API key is not set.")

    def _check_file(self, upload: UploadFile):
        if not os.path.isfile(upload.path):
            raise ConfigurationError(f"File to upload not found: {upload.path}")
        if not os.access(upload.path, os.R_OK):
            raise ConfigurationError(f"File to upload is not readable: {upload.path}")

    def _open(self, step: str, upload: UploadFile):
        try:
            return upload.open()
        except OSError as ex:
            raise UploadError(step, ex.strerror, message=f"Unable to read file to upload, "
                              f"{upload.path}: {ex.strerror}") from ex

    def _lookup_file(self):
        if self.file_source is None:
            return None
        return self.file_source.get(self.file_field)

    def _dep_url(self, depid):
        return f"{self.base_url}/{depid}"

    def _send(self, step: str, method: str, url: str, **kw) -> TransportResponse:
        try:
            return self.transport.request(method, url, params={"access_token": self.access_token}, **kw)
        except TransportError as ex:
            raise RemoteServiceError(step, cause=ex) from ex

    def _call(self, step: str, method: str, url: str, **kw) -> TransportResponse:
        res = self._send(step, method, url, **kw)
        if res.status >= 400:
            raise RemoteServiceError(step, res.status, res.body)
        return res
