"""FastAPI app for ad-hoc notifications."""

from fastapi import FastAPI

from pushel.logger import get_logger
from pushel.model.models import AdhocRequest
from pushel.scheduler.reminders import NotificationSink

__all__ = ["NOTIFY_ACK", "create_app"]

NOTIFY_ACK = "Notification sent"

logger = get_logger("api")


def create_app(sink: NotificationSink) -> FastAPI:
    """Build the app around *sink*.

    The route delivers immediately and never looks at the activity signal.
    """
    app = FastAPI(
        title="Pushel",
        description="Ad-hoc desktop notifications",
    )

    # --- endpoints ---

    @app.post("/api/v1/notify")
    def notify(req: AdhocRequest) -> str:
        """Render the notification in the request body right away."""
        logger.info("Ad-hoc notification requested: %s", req.message)
        delivered = sink.notify(req)
        if not delivered:
            logger.warning("Ad-hoc notification could not be delivered: %s", req.message)
        return NOTIFY_ACK

    return app
