from simap.storage.interface import SessionStore
from simap.storage.filesystem import FilesystemSessionStore
from simap.storage.s3 import S3SessionStore
from simap.config import settings

def get_session_store() -> SessionStore:
    """
    Factory function to create the appropriate storage implementation
    based on settings.
    
    Returns:
        A session store (S3 or Filesystem)
    """
    storage_type = settings.STORAGE_TYPE.lower()
    
    if storage_type == "s3":
        if not settings.S3_BUCKET:
            raise ValueError("S3_BUCKET must be set when using S3 storage")
        
        return S3SessionStore(
            bucket_name=settings.S3_BUCKET,
            prefix=settings.S3_PREFIX,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.AWS_REGION
        )
    
    if storage_type != "filesystem":
        raise ValueError(f"Unknown STORAGE_TYPE: {settings.STORAGE_TYPE}")
    return FilesystemSessionStore(base_dir=settings.SESSION_STORAGE_DIR)
