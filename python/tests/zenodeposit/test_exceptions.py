import pdb
import unittest as test

from zenodeposit import exceptions as exc

class TestExceptions(test.TestCase):

    def test_hierarchy(self):
        for cls in [exc.ConfigurationError, exc.RemoteServiceError, exc.ProtocolError,
                    exc.UploadError, exc.PreconditionError, exc.TransportError]:
            self.assertTrue(issubclass(cls, exc.DepositException), cls.__name__)

    def test_deposit_exception(self):
        ex = exc.DepositException()
        self.assertEqual(str(ex), "Problem executing deposition")
        ex = exc.DepositException(step="upload file", cause=ValueError("bad"))
        self.assertEqual(str(ex), "Problem executing deposition step, upload file: bad")
        self.assertEqual(ex.step, "upload file")

    def test_remote_service_error(self):
        ex = exc.RemoteServiceError("create deposition", 500, "Internal Server Error")
        self.assertEqual(str(ex), "create deposition failed: HTTP error: 500 - Internal Server Error")
        self.assertEqual(ex.status, 500)
        self.assertEqual(ex.body, "Internal Server Error")

        ex = exc.RemoteServiceError("create deposition", cause=exc.TransportError("https://zenodo.org"))
        self.assertEqual(str(ex), "create deposition failed: Failed to communicate with https://zenodo.org")
        self.assertIsNone(ex.status)

        ex = exc.RemoteServiceError(None, 404, message="Deposition 3 not found")
        self.assertEqual(str(ex), "Deposition 3 not found")

    def test_protocol_error(self):
        ex = exc.ProtocolError("create new version", "links.latest_draft")
        self.assertEqual(str(ex), "Invalid response from create new version: missing links.latest_draft")
        self.assertEqual(ex.field, "links.latest_draft")

    def test_upload_error(self):
        ex = exc.UploadError("upload file", "Quota exceeded")
        self.assertEqual(str(ex), "File upload to Zenodo failed: Quota exceeded")
        ex = exc.UploadError("upload file")
        self.assertEqual(str(ex), "File upload to Zenodo failed: Unknown error")


if __name__ == '__main__':
    test.main()
