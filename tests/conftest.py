import pytest

from requestkit.transport import BufferedTransportResponse, Transport


class RecordingTransport(Transport):
    """Records every attempt; replays queued failures, then a response."""

    def __init__(self, response=None, failures=()):
        self.response = response or BufferedTransportResponse(200, b"{}")
        self.failures = list(failures)
        self.sent = []

    def send(self, request, body):
        self.sent.append((request, body))
        if self.failures:
            raise self.failures.pop(0)
        return self.response


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def make_transport():
    return RecordingTransport


@pytest.fixture
def base(transport):
    return transport.request("http://example.com")
