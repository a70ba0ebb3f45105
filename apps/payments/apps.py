from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.payments'

    # Processor client shared by every request; built once from settings.
    gateway = None

    def ready(self):
        from .gateway import MercadoPagoGateway
        self.gateway = MercadoPagoGateway.from_settings()
