# accounts/services.py
from __future__ import annotations

import logging

from django.db import transaction

from .models import RoleChangeLog, User

logger = logging.getLogger(__name__)


@transaction.atomic
def change_role(*, target: User, new_role: str, changed_by: User, reason: str = "") -> RoleChangeLog:
    """Switch a user's role and leave an audit row behind."""
    old_role = target.role
    target.role = new_role
    target.save(update_fields=["role"])
    entry = RoleChangeLog.objects.create(
        target=target,
        changed_by=changed_by,
        old_role=old_role,
        new_role=new_role,
        reason=reason,
    )
    logger.info("Role of %s changed %s -> %s by %s", target.username, old_role, new_role, changed_by.username)
    return entry
