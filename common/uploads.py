"""
Upload helpers shared by the models that store files under MEDIA_ROOT.
"""
import logging
import os
import secrets
import time

from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


def unique_upload_path(folder, prefix, filename):
    """uploads/<folder>/<PREFIX>-<millis>-<random><ext>"""
    ext = os.path.splitext(filename)[1].lower()
    stamp = int(time.time() * 1000)
    return f"{folder}/{prefix}-{stamp}-{secrets.randbelow(10 ** 9)}{ext}"


def delete_stored_file(name):
    """Remove a stored file, logging instead of failing when it is already gone"""
    if not name:
        return
    try:
        if default_storage.exists(name):
            default_storage.delete(name)
    except OSError as e:
        logger.warning(f"Could not delete stored file {name}: {e}")
