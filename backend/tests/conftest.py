import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))
TESTS_ROOT = Path(__file__).resolve().parent
if str(TESTS_ROOT) not in sys.path:
	sys.path.insert(0, str(TESTS_ROOT))

from fakes import InMemoryGroupsRepository
from kure.groups.api import groups as groups_api, members as members_api, posts as posts_api
from kure.groups.config import GroupsConfig
from kure.groups.domain.access_service import AccessStore
from kure.groups.domain.catalog_service import GroupCatalog
from kure.groups.domain.posts_service import PostIndex
from kure.groups.services.aggregation import AggregationEngine
from kure.infra import postgres
from kure.main import app


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture()
def groups_config() -> GroupsConfig:
	return GroupsConfig()


@pytest.fixture()
def memory_repo() -> InMemoryGroupsRepository:
	return InMemoryGroupsRepository()


@pytest.fixture()
def access_store(memory_repo, groups_config) -> AccessStore:
	return AccessStore(repository=memory_repo, config=groups_config)


@pytest.fixture()
def catalog(memory_repo, access_store, groups_config) -> GroupCatalog:
	return GroupCatalog(repository=memory_repo, access=access_store, config=groups_config)


@pytest.fixture()
def post_index(memory_repo, access_store, groups_config) -> PostIndex:
	return PostIndex(repository=memory_repo, access=access_store, config=groups_config)


@pytest.fixture()
def engine(memory_repo, access_store, catalog, post_index, groups_config) -> AggregationEngine:
	return AggregationEngine(
		repository=memory_repo,
		access=access_store,
		catalog=catalog,
		posts=post_index,
		config=groups_config,
	)


@pytest.fixture()
def wired_api(monkeypatch, access_store, catalog, post_index, engine):
	"""Point the route modules at services backed by the in-memory repository."""
	monkeypatch.setattr(groups_api, "_catalog", catalog)
	monkeypatch.setattr(groups_api, "_engine", engine)
	monkeypatch.setattr(members_api, "_service", access_store)
	monkeypatch.setattr(posts_api, "_service", post_index)


@pytest_asyncio.fixture
async def api_client(wired_api):
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
