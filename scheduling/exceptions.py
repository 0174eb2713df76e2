import logging

from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling services."""
    code = 'scheduling_error'


class TimeConflictError(SchedulingError):
    """The doctor already has an active appointment too close to the requested time."""
    code = 'time_conflict'

    def __init__(self, conflicts=None, window: int = 30) -> None:
        self.conflicts = list(conflicts or [])
        self.window = window
        super().__init__(
            f'Time conflict: This doctor already has an appointment within {window} minutes of this time'
        )


class TransitionNotAllowed(SchedulingError):
    code = 'invalid_transition'

    def __init__(self, current: str, new: str, reason: str | None = None) -> None:
        self.current = current
        self.new = new
        super().__init__(reason or f'cannot change status from {current} to {new}')


class NotificationError(SchedulingError):
    """The reschedule webhook could not be delivered."""
    code = 'notification_failed'


class WebhookNotConfigured(NotificationError):
    """No reschedule webhook URL is set."""


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}}, status=resp.status_code)
