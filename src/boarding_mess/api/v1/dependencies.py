"""Shared API dependencies for authentication and common functionality."""

from datetime import date
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from boarding_mess.core.security import decode_member_id
from boarding_mess.db.session import get_db
from boarding_mess.models import Member
from boarding_mess.services.clock import Clock, DatabaseClock
from boarding_mess.services.cutoff import CutoffPolicy, get_cutoff_policy
from boarding_mess.services.errors import (
    BackfillRangeError,
    CutoffExceeded,
    EggsUnavailable,
    InvalidQuantity,
    MemberNotFound,
    MessError,
    PermissionDenied,
)
from boarding_mess.services.reports import AccountingPeriod, accounting_period_for

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_member(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> Member:
    """Get the current authenticated member from JWT token.

    Raises:
        HTTPException: If token is invalid or member not found
    """
    try:
        member_id = decode_member_id(credentials.credentials)
    except (JWTError, ValueError) as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    member = db.get(Member, member_id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Member not found",
        )
    return member


CurrentMemberDep = Annotated[Member, Depends(get_current_member)]


def require_admin(member: CurrentMemberDep) -> Member:
    """Allow only administrators through."""
    if not member.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return member


AdminDep = Annotated[Member, Depends(require_admin)]


def get_clock(db: SessionDep) -> Clock:
    """Return the trusted clock: the database serving this request."""
    return DatabaseClock(db)


def get_policy() -> CutoffPolicy:
    return get_cutoff_policy()


ClockDep = Annotated[Clock, Depends(get_clock)]
PolicyDep = Annotated[CutoffPolicy, Depends(get_policy)]

_STATUS_BY_ERROR: tuple[tuple[type[MessError], int], ...] = (
    (CutoffExceeded, status.HTTP_403_FORBIDDEN),
    (PermissionDenied, status.HTTP_403_FORBIDDEN),
    (InvalidQuantity, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (MemberNotFound, status.HTTP_404_NOT_FOUND),
    (EggsUnavailable, status.HTTP_409_CONFLICT),
    (BackfillRangeError, status.HTTP_400_BAD_REQUEST),
)


def http_error(err: MessError) -> HTTPException:
    """Translate a service exception into the matching HTTP error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(err, error_type):
            return HTTPException(status_code=status_code, detail=str(err))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(err))


def resolve_period(
    start: date | None,
    end: date | None,
    member: Member | None,
    today: date,
) -> AccountingPeriod:
    """Return an explicit ``start``..``end`` range or the member's current period."""
    if start is None and end is None:
        return accounting_period_for(member, today)
    if start is None or end is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start and end must be given together",
        )
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end must not precede start",
        )
    return AccountingPeriod(start, end)
