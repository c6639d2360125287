import json

import pytest
import requests


class DummyResp:
    def __init__(self, data=None, status_code=200, text=None):
        self._data = data
        self.status_code = status_code
        if text is None:
            text = "" if isinstance(data, Exception) else json.dumps(data)
        self.text = text

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)
        return None


class FakeSession:
    """Serves canned responses keyed by URL and records every call."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def _serve(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        resp = self.routes[url]
        if isinstance(resp, Exception):
            raise resp
        return resp

    def post(self, url, **kwargs):
        return self._serve("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._serve("GET", url, **kwargs)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def resp():
    return DummyResp


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def creds():
    from config import Credentials
    return Credentials(client_id="cid1234", client_secret="csec")


@pytest.fixture
def bad_json():
    return ValueError("Expecting value: line 1 column 1 (char 0)")
