# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Domain errors raised by services and repositories, mapped to HTTP by controllers."""


class MemberError(Exception):
    """Base class for every member-service domain error."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MemberError):
    """Duplicate email/phone, unknown or cyclic upline."""


class NotFoundError(MemberError):
    """No member for the given id, at any recursion depth."""

    def __init__(self, member_id: int):
        super().__init__(f"Member with ID {member_id} not found.")
        self.member_id = member_id


class ConflictError(MemberError):
    """Operation blocked by the current shape of the hierarchy."""


class PlacementError(ConflictError):
    """No eligible upline could be secured for a new member."""


class CapacityExceeded(MemberError):
    """Store-level refusal: the upline filled up between resolve and insert."""

    def __init__(self, upline_id: int):
        super().__init__(f"Member {upline_id} has no free downline slot.")
        self.upline_id = upline_id
