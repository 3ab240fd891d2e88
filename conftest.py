# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Shared fixtures: a fresh in-memory store, service and HTTP client per test."""
import itertools

import pytest
from httpx import AsyncClient, ASGITransport

from main import app
from member_service.core.dependencies import get_member_repo, get_member_service
from member_service.repositories.memory_repository import InMemoryMemberRepository
from member_service.services.member_service import MemberService


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def repo():
    return InMemoryMemberRepository()


@pytest.fixture
def service(repo):
    return MemberService(repo, max_downlines=2, search_limit=10, placement_retries=5)


@pytest.fixture
def make_member(service):
    """Create members with unique contact details; returns the wire dict."""
    seq = itertools.count(1)

    async def _make(name=None, upline_id=None, svc=None):
        n = next(seq)
        return await (svc or service).create_member(
            name=name or f"Member {n}",
            phone=f"+1555{n:07d}",
            email=f"member{n}@example.com",
            upline_id=upline_id,
        )

    return _make


@pytest.fixture
async def client(repo, service):
    app.dependency_overrides[get_member_repo] = lambda: repo
    app.dependency_overrides[get_member_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
