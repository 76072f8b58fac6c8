# payments/apps.py

"""
PAYMENTS APP CONFIG

Sale / purchase payments and overpayment resolution.
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
