"""
The HTTP transport used to talk to the Zenodo service.

The :py:class:`~zenodeposit.workflow.DepositionWorkflow` sends each of its requests through a
:py:class:`Transport`, which returns the response status and body text without interpreting
them.  :py:class:`RequestsTransport` is the default implementation based on the ``requests``
package; alternate implementations (e.g. for testing) can be plugged into the workflow.
"""
import logging
from abc import ABCMeta, abstractmethod
from collections import namedtuple
from collections.abc import Mapping

import requests

from .exceptions import TransportError
from .utils.logging import blab

log = logging.getLogger(__name__)

TransportResponse = namedtuple('TransportResponse', "status body")

class Transport(metaclass=ABCMeta):
    """
    an interface for performing a single HTTP request
    """

    @abstractmethod
    def request(self, method: str, url: str, params: Mapping=None, headers: Mapping=None,
                json=None, data=None, files: Mapping=None) -> TransportResponse:
        """
        send an HTTP request and return the server's response.  At most one of ``json``, ``data``,
        and ``files`` should be provided as the request body.

        :param str method:    the HTTP method (e.g. "GET", "PUT")
        :param str url:       the target URL (without query parameters)
        :param Mapping params:  query parameters to append to the URL
        :param Mapping headers: HTTP headers to include with the request
        :param json:          a JSON-encodable object to send as the body
        :param data:          raw bytes or a readable binary stream to send as the body
        :param Mapping files: multipart file fields to send as the body; each value is a 2-tuple
                              of the filename and a readable binary stream
        :return:  the response status code and body text
                  :rtype: TransportResponse
        :raises TransportError:  if no response could be obtained from the server
        """
        raise NotImplementedError()

class RequestsTransport(Transport):
    """
    a Transport implemented with a ``requests`` Session
    """

    def __init__(self, timeout: float=None, verify: bool=True, session: requests.Session=None):
        """
        :param float timeout:  the number of seconds to wait for a server response before giving
                               up; if None, wait indefinitely
        :param bool   verify:  if False, do not verify the server's SSL certificate
        :param requests.Session session:  the Session to send requests through; if not provided,
                               one will be created.
        """
        self.timeout = timeout
        self.verify = verify
        if not session:
            session = requests.Session()
        self.session = session

    def request(self, method: str, url: str, params: Mapping=None, headers: Mapping=None,
                json=None, data=None, files: Mapping=None) -> TransportResponse:
        blab(log, "Sending %s %s", method, url)
        try:
            resp = self.session.request(method, url, params=params, headers=headers, json=json,
                                        data=data, files=files, timeout=self.timeout,
                                        verify=self.verify)
        except requests.RequestException as ex:
            raise TransportError(url, cause=ex) from ex

        blab(log, "%s %s: %s %s", method, url, resp.status_code, resp.reason)
        return TransportResponse(resp.status_code, resp.text)

    def close(self):
        """
        release the connection resources held by the underlying session
        """
        self.session.close()
