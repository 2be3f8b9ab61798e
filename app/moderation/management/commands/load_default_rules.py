from django.core.management.base import BaseCommand

from app.moderation.services.catalog import RuleCatalogService


class Command(BaseCommand):
    help = "Cadastra no banco o catálogo padrão de regras de violação (regras existentes são mantidas)."

    def handle(self, *args, **options):
        created = RuleCatalogService.seed_defaults()
        RuleCatalogService.invalidate()
        self.stdout.write(self.style.SUCCESS(f"{created} regra(s) cadastrada(s)."))
