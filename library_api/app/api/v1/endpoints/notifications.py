"""
Notification feed for API v1.

UI clients poll this endpoint to render toasts (each disappears once
it expires) and the global loading indicator.
"""

from fastapi import APIRouter, Depends

from library_api.app.api.deps import get_notifier
from library_api.app.core.notifications import Notifier
from library_api.app.schemas.notification import NotificationFeed, NotificationRead

router = APIRouter()


@router.get("/", response_model=NotificationFeed)
async def list_notifications(notifier: Notifier = Depends(get_notifier)) -> NotificationFeed:
    return NotificationFeed(
        notifications=[NotificationRead.model_validate(n) for n in notifier.active()],
        loading=notifier.loader_label,
    )
