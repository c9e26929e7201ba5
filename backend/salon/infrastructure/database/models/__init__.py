from .salon_models import AppointmentModel, ClientModel, ServiceModel

__all__ = [
    "AppointmentModel",
    "ClientModel",
    "ServiceModel",
]
