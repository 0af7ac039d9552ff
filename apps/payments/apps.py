from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.payments"
    label = "payments"

    _gateway = None

    def get_gateway(self):
        """The process-wide gateway, built from settings on first use."""
        if self._gateway is None:
            from .gateway import build_gateway

            self._gateway = build_gateway()
        return self._gateway
