import pytest

from rpcws.client.session import RpcSession
from tests.conftest import MockTransport


class BaseSessionTest:
    @pytest.fixture(autouse=True)
    def setup_fixtures(self):
        self.transport = MockTransport()
        self.urls: list[tuple[str, object]] = []

        def factory(url, protocols):
            self.urls.append((url, protocols))
            return self.transport

        self.session = RpcSession(transport_factory=factory)

    @pytest.fixture(autouse=True)
    async def teardown_session(self):
        yield
        if hasattr(self, "session"):
            await self.session.close()

    async def connect(self) -> None:
        await self.session.connect("ws://test.local/rpc")
