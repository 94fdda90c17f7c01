"""Image upload services.

Uploading is a two-step flow:

1. A signed-in caller asks for an upload URL. The URL embeds a signed,
   time-limited token that can be redeemed once.
2. The client sends the raw bytes to that URL and gets back a storage
   identifier, which it attaches to a category or product.

Displaying an image is a separate lookup from identifier to public URL.
"""

import logging
import mimetypes
import uuid

from django.contrib.auth import get_user_model
from django.core import signing
from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile
from django.db import IntegrityError, transaction
from django.urls import reverse

from ..conf import get_setting
from ..exceptions import Conflict, NotFound, ValidationFailed
from ..models import StoredFile
from ..permissions import require_catalog_editor

logger = logging.getLogger(__name__)

UPLOAD_SALT = "storefront.store.uploads"


def generate_upload_url(*, user) -> str:
    """Issue a short-lived, single-use upload URL."""
    require_catalog_editor(user, "Must be logged in to upload images")

    token = signing.TimestampSigner(salt=UPLOAD_SALT).sign_object(
        {"k": uuid.uuid4().hex, "u": str(user.pk)}
    )
    return reverse("store:upload-content", kwargs={"token": token})


def _unsign_upload_token(token: str) -> dict:
    signer = signing.TimestampSigner(salt=UPLOAD_SALT)
    try:
        return signer.unsign_object(token, max_age=get_setting("UPLOAD_URL_MAX_AGE"))
    except signing.SignatureExpired:
        raise ValidationFailed("Upload URL has expired")
    except signing.BadSignature:
        raise ValidationFailed("Invalid upload URL")


def store_upload(*, token: str, content: bytes, content_type: str = "") -> StoredFile:
    """Redeem an upload token for the given binary content."""
    payload = _unsign_upload_token(token)

    if not content:
        raise ValidationFailed("Upload is empty")
    max_bytes = get_setting("UPLOAD_MAX_BYTES")
    if len(content) > max_bytes:
        raise ValidationFailed(f"Upload exceeds {max_bytes} bytes")

    content_type = (content_type or "application/octet-stream").split(";")[0].strip()
    extension = mimetypes.guess_extension(content_type) or ""
    upload_key = payload["k"]

    if StoredFile.objects.filter(upload_key=upload_key).exists():
        raise Conflict("Upload URL has already been used")

    # The uploader may have been deleted since the URL was issued
    uploader_id = payload.get("u")
    uploader = get_user_model().objects.filter(pk=uploader_id).first() if uploader_id else None

    stored = StoredFile(
        content_type=content_type,
        size=len(content),
        upload_key=upload_key,
        uploaded_by=uploader,
    )
    stored.file.save(f"{upload_key}{extension}", ContentFile(content), save=False)

    try:
        with transaction.atomic():
            stored.save()
    except IntegrityError:
        stored.file.delete(save=False)
        raise Conflict("Upload URL has already been used")

    logger.info(f"Stored upload {stored.pk} ({stored.size} bytes, {content_type})")
    return stored


def get_stored_file(storage_id) -> StoredFile:
    """Resolve a storage identifier, raising NotFound when unknown."""
    if storage_id in (None, ""):
        return None
    try:
        return StoredFile.objects.get(pk=storage_id)
    except (StoredFile.DoesNotExist, ValueError, ValidationError):
        raise NotFound("File not found")


def file_url(stored_file) -> str | None:
    """Public URL of a stored file, or None."""
    if stored_file is None or not stored_file.file:
        return None
    return stored_file.file.url


def get_file_url(storage_id) -> str | None:
    """Public URL for a storage identifier, or None when it does not exist."""
    try:
        return file_url(get_stored_file(storage_id))
    except NotFound:
        return None
