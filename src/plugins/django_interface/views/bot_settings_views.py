from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from order_bot.adapters.config.composition_root import container as ob_container
from order_bot.core.application.commands.bot_settings_commands import UpdateBotSettingsCommand
from order_bot.core.application.dtos.bot_settings_dto import BotSettingsUpdateDTO, TemplatePreviewDTO
from order_bot.core.application.queries.bot_settings_queries import GetBotSettingsQuery, PreviewTemplateQuery
from plugins.django_interface.serializers.order_serializers import BotSettingsSerializer
from plugins.django_interface.views.errors import error_response, pydantic_error_response

command_bus = ob_container.command_bus()
query_bus = ob_container.query_bus()


class BotSettingsView(APIView):
    """GET/PUT /api/clients/<client_id>/bot-settings/"""

    def get(self, request, client_id: int):
        try:
            bot_settings = query_bus.dispatch(GetBotSettingsQuery(filtros={"client_id": client_id}))
        except Exception as exc:
            return error_response(exc)
        return Response(BotSettingsSerializer(bot_settings).data)

    def put(self, request, client_id: int):
        try:
            payload = BotSettingsUpdateDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)
        try:
            bot_settings = command_bus.dispatch(UpdateBotSettingsCommand(client_id=client_id, payload=payload))
        except Exception as exc:
            return error_response(exc)
        return Response(BotSettingsSerializer(bot_settings).data)


class TemplatePreviewView(APIView):
    """POST /api/clients/<client_id>/bot-settings/preview/"""

    def post(self, request, client_id: int):
        try:
            payload = TemplatePreviewDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)
        try:
            rendered = query_bus.dispatch(
                PreviewTemplateQuery(
                    filtros={"client_id": client_id, "channel": payload.channel, "template": payload.template}
                )
            )
        except Exception as exc:
            return error_response(exc)
        return Response({"channel": payload.channel, "preview": rendered}, status=status.HTTP_200_OK)
