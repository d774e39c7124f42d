from dataclasses import dataclass
from types import ModuleType

from makeeasy import settings as default_settings
from makeeasy.payments import PaymentGateway
from makeeasy.storage import FileStore


@dataclass
class AppContext:
    """Collaborators built once per app and handed to routes via deps."""

    settings: ModuleType
    payments: PaymentGateway
    files: FileStore


def build_context(settings: ModuleType = default_settings) -> AppContext:
    return AppContext(
        settings=settings,
        payments=PaymentGateway(settings.razorpay_key_id, settings.razorpay_key_secret),
        files=FileStore(settings.upload_dir),
    )
