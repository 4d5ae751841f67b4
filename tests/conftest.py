import pytest


class FakeResponse:
    """
    Minimal stand-in for requests.Response.
    """
    def __init__(self, payload=None, status_code=200, text="", json_error=None):
        self._payload = payload if payload is not None else {}
        self.status_code = status_code
        self.text = text
        self.json_error = json_error

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.json_error is not None:
            raise self.json_error
        return self._payload


@pytest.fixture
def fake_response():
    return FakeResponse
