from django.core.management.base import BaseCommand
from django.db import transaction

from plugins.django_interface.models import BotSettings, Client


class Command(BaseCommand):
    help = "Cria (ou atualiza) um cliente de demonstração com BotSettings padrão."

    def add_arguments(self, parser):
        parser.add_argument("--email", default="demo@shop.example.com")
        parser.add_argument("--name", default="Demo Store")
        parser.add_argument("--company", default="Demo Store")
        parser.add_argument("--phone", default="213555000000")
        parser.add_argument("--language", default="en", choices=["en", "fr", "ar"])
        parser.add_argument("--sms", action="store_true", default=False, help="Habilita SMS")

    @transaction.atomic
    def handle(self, *args, **opts):
        client, created = Client.objects.update_or_create(
            email=opts["email"],
            defaults={
                "name": opts["name"],
                "company_name": opts["company"],
                "phone": opts["phone"],
                "language": opts["language"],
            },
        )
        BotSettings.objects.update_or_create(
            client=client,
            defaults={"sms_enabled": opts["sms"], "company_name": opts["company"]},
        )
        verb = "criado" if created else "atualizado"
        self.stdout.write(self.style.SUCCESS(f"Cliente {verb}: id={client.id} <{client.email}>"))
