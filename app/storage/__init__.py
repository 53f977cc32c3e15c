from app.storage.base import BaseStorageGateway
from app.storage.models import UploadHandle
from app.storage.supabase_adapter import SupabaseStorageGateway

__all__ = ["BaseStorageGateway", "SupabaseStorageGateway", "UploadHandle"]
