"""Issue a bearer token for an existing member.

Accounts are provisioned outside this service; operators use this to hand a
token to a member or to a client under test.
"""

from __future__ import annotations

import argparse
import sys

from boarding_mess.core.security import create_access_token
from boarding_mess.db.session import SessionLocal
from boarding_mess.models import Member


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print a bearer token for a member")
    parser.add_argument("member_id", type=int)
    args = parser.parse_args(argv)

    with SessionLocal() as db:
        member = db.get(Member, args.member_id)
    if member is None:
        print(f"Member {args.member_id} not found", file=sys.stderr)
        return 1

    print(create_access_token(member.id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
