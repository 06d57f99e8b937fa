"""
Caller identity.

Token verification happens in the upstream auth gateway, which forwards the
verified account identifier in the X-Account-Id header. Routes that act on
behalf of a buyer or a restaurant owner depend on get_current_account_id.
"""

from typing import Optional

from fastapi import Header, HTTPException

ACCOUNT_HEADER = "X-Account-Id"


def get_current_account_id(
    x_account_id: Optional[str] = Header(default=None, alias=ACCOUNT_HEADER),
) -> str:
    if not x_account_id or not x_account_id.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return x_account_id.strip()
