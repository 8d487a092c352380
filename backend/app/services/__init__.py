from app.services.registration_service import RegistrationService
from app.services.registration_store import RegistrationStore
from app.services.admin_channel import AdminChannelManager, admin_channel

__all__ = [
    "RegistrationService",
    "RegistrationStore",
    "AdminChannelManager",
    "admin_channel",
]
