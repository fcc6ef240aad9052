"""
Storage configuration for ManzelHelp.
Supports AWS S3 for production and local storage for development.
"""
import os
from pathlib import Path

# Check if S3 should be used
USE_S3 = os.getenv('USE_S3_STORAGE', 'false').lower() == 'true'

STATIC_STORAGE = {
    'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
}


def get_storage_settings(base_dir: Path) -> dict:
    """
    Returns storage-related settings based on environment configuration.

    Args:
        base_dir: The BASE_DIR from Django settings

    Returns:
        Dictionary of storage settings to be merged into Django settings
    """
    if USE_S3:
        # Production: avatars, ID documents and refund receipts on S3
        return {
            'USE_S3_STORAGE': True,
            'STORAGES': {
                'default': {'BACKEND': 'storages.backends.s3.S3Storage'},
                'staticfiles': STATIC_STORAGE,
            },
            'AWS_ACCESS_KEY_ID': os.getenv('AWS_ACCESS_KEY_ID'),
            'AWS_SECRET_ACCESS_KEY': os.getenv('AWS_SECRET_ACCESS_KEY'),
            'AWS_STORAGE_BUCKET_NAME': os.getenv('AWS_STORAGE_BUCKET_NAME', 'manzelhelp-uploads'),
            'AWS_S3_REGION_NAME': os.getenv('AWS_S3_REGION_NAME', 'eu-west-3'),
            'AWS_S3_FILE_OVERWRITE': False,
            'AWS_DEFAULT_ACL': 'private',
            'AWS_S3_CUSTOM_DOMAIN': os.getenv('AWS_S3_CUSTOM_DOMAIN') or None,
            'AWS_QUERYSTRING_AUTH': True,  # Signed URLs for ID documents and receipts
            'AWS_QUERYSTRING_EXPIRE': int(os.getenv('AWS_QUERYSTRING_EXPIRE', '3600')),
            'AWS_S3_OBJECT_PARAMETERS': {
                'CacheControl': 'max-age=86400',  # 1 day cache
            },
            'MEDIA_URL': '/media/',
        }
    else:
        # Development: Use local file storage
        return {
            'USE_S3_STORAGE': False,
            'STORAGES': {
                'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
                'staticfiles': STATIC_STORAGE,
            },
            'MEDIA_URL': '/media/',
            'MEDIA_ROOT': base_dir / 'media',
        }


# Convenience flag for services to check storage type
def is_s3_enabled() -> bool:
    """Check if S3 storage is enabled."""
    return USE_S3
