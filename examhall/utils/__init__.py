"""
Utils Package
"""
from examhall.utils.helpers import (
    now_utc,
    utc_to_local,
    local_today,
    isoformat,
    commit_or_raise,
    configure_logging
)
from examhall.utils.auth import (
    ROLES,
    AUTHOR_ROLES,
    generate_token,
    verify_token,
    get_current_user,
    require_auth,
    require_roles
)

__all__ = [
    'now_utc',
    'utc_to_local',
    'local_today',
    'isoformat',
    'commit_or_raise',
    'configure_logging',
    'ROLES',
    'AUTHOR_ROLES',
    'generate_token',
    'verify_token',
    'get_current_user',
    'require_auth',
    'require_roles'
]
