# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package: re-exports the member store implementations."""
from member_service.repositories.memory_repository import InMemoryMemberRepository
from member_service.repositories.sql_repository import SqlMemberRepository

__all__ = ["InMemoryMemberRepository", "SqlMemberRepository"]
