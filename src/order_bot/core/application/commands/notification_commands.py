from dataclasses import dataclass

from order_bot.core.application.cqrs import CommandDTO
from order_bot.core.application.dtos.notification_job_dto import NotificationJobDTO


@dataclass(frozen=True)
class DispatchNotificationCommand(CommandDTO):
    """Uma tentativa (1-based) de entregar o job."""
    job: NotificationJobDTO
    attempt: int = 1

@dataclass(frozen=True)
class SweepUnsentOrdersCommand(CommandDTO):
    batch_size: int = 100
