"""
Decoders for the bodies of the responses returned by Zenodo's deposition API.

Each endpoint used by the :py:class:`~zenodeposit.workflow.DepositionWorkflow` has a small record
type here capturing just the properties the workflow depends on.  The ``as_*`` functions convert
a parsed JSON body into these records, raising a :py:class:`~zenodeposit.exceptions.ProtocolError`
if a required property is missing.
"""
import json
from collections import namedtuple
from collections.abc import Mapping

from .exceptions import ProtocolError

Deposition = namedtuple('Deposition', "id state published bucket_url")
NewVersion = namedtuple('NewVersion', "latest_draft_url draft_id")
FileUpload = namedtuple('FileUpload', "error filename")
PublishedRecord = namedtuple('PublishedRecord', "id doi")

def load_json(body: str, step: str) -> Mapping:
    """
    parse a response body as a JSON object
    :param str body:  the response body text
    :param str step:  the name of the workflow step that received the response
    :raises ProtocolError:  if the body is empty, is not JSON, or is not a JSON object
    """
    if not body:
        raise ProtocolError(step, message=f"Empty response from {step}")
    try:
        out = json.loads(body)
    except ValueError as ex:
        if "<body" in body or "<BODY" in body:
            msg = f"HTML returned where JSON expected from {step} (is service URL correct?)"
        else:
            msg = f"Unable to parse response from {step} as JSON"
        raise ProtocolError(step, body=body, message=msg) from ex

    if not isinstance(out, Mapping):
        raise ProtocolError(step, body=body, message=f"Unexpected JSON response from {step}")
    return out

def get_property(data: Mapping, path: str, step: str, required: bool=True):
    """
    return the value of a (possibly nested) property from a JSON object.
    :param Mapping data:  the JSON object
    :param str     path:  the name of the property; nested properties are delimited with a dot
                          (e.g. "links.bucket")
    :param str     step:  the name of the workflow step that received the data
    :param bool required: if True (default), raise an exception if the property is not set;
                          otherwise, return None.
    :raises ProtocolError:  if the property is required but not set
    """
    val = data
    for name in path.split('.'):
        if not isinstance(val, Mapping) or val.get(name) is None:
            if required:
                raise ProtocolError(step, path, json.dumps(data))
            return None
        val = val[name]
    return val

def as_deposition(data: Mapping, step: str) -> Deposition:
    """
    decode the description of a deposition, as returned when a deposition is created or
    retrieved.  Only the ``id`` property is required.
    """
    return Deposition(get_property(data, "id", step),
                      get_property(data, "state", step, False),
                      get_property(data, "published", step, False),
                      get_property(data, "links.bucket", step, False))

def as_new_version(data: Mapping, step: str) -> NewVersion:
    """
    decode the response to a new-version request.  The identifier of the new draft is the last
    field of the required ``links.latest_draft`` URL.
    """
    url = get_property(data, "links.latest_draft", step)
    draftid = url.rstrip('/').rsplit('/', 1)[-1]
    if not draftid:
        raise ProtocolError(step, "links.latest_draft", json.dumps(data),
                            message=f"Unable to extract draft identifier from {url}")
    return NewVersion(url, draftid)

def as_file_upload(data: Mapping, step: str) -> FileUpload:
    """
    decode the response to a file upload.  An ``error`` property indicates the upload failed
    even if the response status indicated success.
    """
    return FileUpload(get_property(data, "error", step, False),
                      get_property(data, "filename", step, False) or
                      get_property(data, "key", step, False))

def as_published(data: Mapping, step: str) -> PublishedRecord:
    """
    decode the response to a publish request, which must include the assigned DOI.
    """
    return PublishedRecord(get_property(data, "id", step, False),
                           get_property(data, "doi", step))
