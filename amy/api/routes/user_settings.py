"""
User Settings API Routes

Currency preference and budget limits for the authenticated user.
"""

import logging

from fastapi import APIRouter

from amy.api.dependencies import (
    CurrentUserDep,
    NotificationServiceDep,
    TaskRunnerDep,
    UserSettingsRepoDep,
)
from amy.domain.user_settings import UserSettingsResponse, UserSettingsUpdateRequest


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/user/settings", response_model=UserSettingsResponse)
async def get_user_settings(repo: UserSettingsRepoDep):
    """Current settings, or defaults when the user never saved any."""
    return UserSettingsResponse.from_settings(await repo.get())


@router.put("/user/settings", response_model=UserSettingsResponse)
async def update_user_settings(
    payload: UserSettingsUpdateRequest,
    user_id: CurrentUserDep,
    repo: UserSettingsRepoDep,
    runner: TaskRunnerDep,
    notifications: NotificationServiceDep,
):
    changes = payload.changes()
    saved = await repo.save(changes) if changes else await repo.get()
    await repo.session.commit()
    logger.info(f"Updated settings for user {user_id}: {sorted(changes)}")

    runner.spawn(
        notifications.check_and_send_budget_alerts(user_id),
        name=f"budget-alerts:{user_id}",
    )
    return UserSettingsResponse.from_settings(saved)
