import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sql_gateway.config import Settings
from sql_gateway.dispatcher import Dispatcher
from sql_gateway.server import create_app
from sql_gateway.tools_manifest import build_catalog
from tests.helpers import RecordingExecutor


@pytest.fixture
def catalog():
    return build_catalog()


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def dispatcher(catalog, executor):
    return Dispatcher(catalog, executor, query_timeout=5)


@pytest.fixture
def generate(catalog):
    """Validate and generate for an operation without executing it"""
    from sql_gateway.validator import validate

    def _generate(name, arguments=None):
        definition = catalog.lookup(name)
        return definition.generator(validate(definition, arguments or {}))

    return _generate


@pytest_asyncio.fixture(scope="function")
async def client(dispatcher):
    app = create_app(Settings(), dispatcher=dispatcher)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def secured_client(dispatcher):
    app = create_app(Settings(api_key="s3cret"), dispatcher=dispatcher)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
