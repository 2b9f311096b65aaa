"""
Exceptions raised while preparing or executing a Zenodo deposition
"""

class DepositException(Exception):
    """
    a general base class for exceptions that occur while depositing a record into Zenodo.  

    All exceptions in this family carry an optional ``step`` property naming the workflow step 
    (e.g. "create deposition") that was underway when the failure occurred.
    """

    def __init__(self, message=None, step=None, cause=None):
        if not message:
            message = "Problem executing deposition"
            if step:
                message += " step, " + step
            if cause:
                message += ": " + str(cause)

        super(DepositException, self).__init__(message)
        self.step = step
        self.cause = cause

class ConfigurationError(DepositException):
    """
    an exception indicating that the client is missing necessary configuration (such as the 
    access token or the file to upload) or that the given configuration is invalid.
    """

    def __init__(self, message, step=None, cause=None):
        super(ConfigurationError, self).__init__(message, step, cause)

class TransportError(DepositException):
    """
    an exception indicating that an HTTP request could not be completed at all (e.g. due to a 
    connection failure or timeout), as opposed to the server responding with an error status.
    """

    def __init__(self, url=None, message=None, cause=None):
        if not message:
            message = "Failed to communicate with "
            message += url if url else "the Zenodo service"
            if cause:
                message += ": " + str(cause)
        super(TransportError, self).__init__(message, cause=cause)
        self.url = url

class RemoteServiceError(DepositException):
    """
    an exception indicating that Zenodo could not be reached or that it responded with an 
    error status.  

    This exception includes two extra public properties, ``status`` and ``body``, which capture 
    the HTTP response status code and the response body text (both None if no response was received).
    """

    def __init__(self, step, status=None, body=None, message=None, cause=None):
        if not message:
            message = f"{step} failed" if step else "Zenodo request failed"
            if status:
                message += f": HTTP error: {status}"
                if body:
                    message += " - " + body
            elif cause:
                message += ": " + str(cause)

        super(RemoteServiceError, self).__init__(message, step, cause)
        self.status = status
        self.body = body

class ProtocolError(DepositException):
    """
    an exception indicating that Zenodo responded successfully but that the response body is 
    missing information the workflow needs to continue (e.g. the new deposition's identifier).
    """

    def __init__(self, step, field=None, body=None, message=None):
        if not message:
            message = f"Invalid response from {step}" if step else "Invalid response from Zenodo"
            if field:
                message += f": missing {field}"
        super(ProtocolError, self).__init__(message, step)
        self.field = field
        self.body = body

class UploadError(DepositException):
    """
    an exception indicating that the file-upload endpoint returned a success status but 
    reported an error within its response.
    """

    def __init__(self, step, error=None, body=None, message=None):
        if not message:
            message = "File upload to Zenodo failed: " + (str(error) if error else "Unknown error")
        super(UploadError, self).__init__(message, step)
        self.error = error
        self.body = body

class PreconditionError(DepositException):
    """
    an exception indicating that the state of a record does not allow the requested operation 
    (e.g. creating a new version of an unpublished deposition).
    """

    def __init__(self, message, step=None):
        super(PreconditionError, self).__init__(message, step)
