"""
HTTP surface for one-off notifications.
"""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, model_validator

from core.dispatcher import NotificationDispatcher
from pushel_core.pushel_core import logger as app_logger
from shared.notification_definition import AdhocNotification
from shared.notification_schema import validate_notification

_LOGGER = app_logger.get_logger()


class AdhocNotificationRequest(BaseModel):
    message: str = Field(min_length=1)
    title: Optional[str] = None
    urgency: Optional[Literal["low", "normal", "critical"]] = None
    expire_time: Optional[int] = Field(default=None, ge=0)
    app_name: Optional[str] = None
    icon: Optional[str] = None
    category: Optional[str] = None
    transient: Optional[bool] = None

    @model_validator(mode="after")
    def check_notification_rules(self) -> "AdhocNotificationRequest":
        # Same rules as notifications.json. The ValueError subclass becomes a 422.
        validate_notification(self.model_dump(), with_interval=False)
        return self

    def to_notification(self) -> AdhocNotification:
        return AdhocNotification.from_dict(self.model_dump())


def create_app(dispatcher: NotificationDispatcher) -> FastAPI:
    """Build the API. Ad-hoc notifications go straight to the dispatcher, ignoring the idle gate."""
    app = FastAPI(title="Pushel", version="1.0.0")

    # Sync handler: FastAPI runs it in its threadpool while notify-send blocks.
    @app.post("/api/v1/notify")
    def notify(request: AdhocNotificationRequest) -> str:
        notification = request.to_notification()
        result = dispatcher.dispatch(notification)
        if not result.success:
            _LOGGER.error("Failed to send ad-hoc notification: {}", result.error_detail)
            raise HTTPException(status_code=502, detail=result.error_detail)
        _LOGGER.info(
            "Ad-hoc notification sent: {} - {}",
            dispatcher.resolve_title(notification),
            notification.message,
        )
        return "Notification sent"

    return app
