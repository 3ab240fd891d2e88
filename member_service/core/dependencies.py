# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire the member store and services.
"""
from member_service.core.config import settings
from member_service.repositories.memory_repository import InMemoryMemberRepository
from member_service.repositories.sql_repository import SqlMemberRepository
from member_service.services.member_service import MemberService


def build_repository(backend: str = settings.STORE_BACKEND):
    if backend == "sql":
        from member_service.core.database import build_engine
        return SqlMemberRepository(build_engine(settings.DATABASE_URL))
    if backend != "memory":
        raise ValueError(f"Unknown STORE_BACKEND '{backend}' (expected 'memory' or 'sql')")
    return InMemoryMemberRepository()


# ── Singleton instances ──
_repo = build_repository()
_service = MemberService(_repo)


# ── FastAPI dependency functions ──
def get_member_repo():
    return _repo


def get_member_service() -> MemberService:
    return _service
