from fastapi import Depends
from pastebin.core.deps import get_current_user
from pastebin.core.errors import AuthorizationDenied

ROLE_RANK = {"user": 1, "admin": 2}

def require_role(min_role: str):
    def _dep(user = Depends(get_current_user)):
        if ROLE_RANK.get(user.role, 0) < ROLE_RANK[min_role]:
            raise AuthorizationDenied("Admin access required" if min_role == "admin" else None)
        return user
    return _dep
