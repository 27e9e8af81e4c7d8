from __future__ import annotations

from abc import ABC, abstractmethod

from order_bot.core.application.dtos.notification_job_dto import NotificationJobDTO


class QueueClient(ABC):
    """
    Porta para a fila durável de jobs de envio.

    Injetada no agendador; nunca uma conexão global de módulo.
    """

    @abstractmethod
    def enqueue(self, job: NotificationJobDTO, countdown: int) -> str:
        """
        Enfileira `job` para rodar daqui a `countdown` segundos.
        Retorna o id do job. Qualquer falha do broker vira SchedulingError.
        """
        ...
