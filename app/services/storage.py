# app/services/storage.py
"""
Image uploads to Supabase Storage.

Files are validated locally (type, size, readable image) before anything is
sent to storage. Objects live under a per-user prefix: '{user_id}/{name}'.
"""

import io
import secrets
from flask import current_app
from PIL import Image, UnidentifiedImageError
from supabase import create_client
from app.services.catalog import find_size, check_image_quality


class UploadValidationError(Exception):
    def __init__(self, message, field='file'):
        self.message = message
        self.field = field
        super().__init__(self.message)


def get_storage_client():
    """
    Supabase client built with the service role key. Server-side only.

    Raises:
        RuntimeError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing
    """
    supabase_url = current_app.config.get('SUPABASE_URL')
    supabase_key = current_app.config.get('SUPABASE_SERVICE_ROLE_KEY')

    if not supabase_url or not supabase_key:
        raise RuntimeError("Supabase credentials not configured.")

    return create_client(supabase_url, supabase_key)


def validate_upload(content_type, data):
    """
    Checks type and size, then reads the image header.

    Returns:
        tuple: (width, height, extension)

    Raises:
        UploadValidationError: with a field-local message
    """
    accepted = current_app.config['ACCEPTED_IMAGE_TYPES']
    if content_type not in accepted:
        raise UploadValidationError("Please upload a JPG or PNG file")

    max_bytes = current_app.config['MAX_UPLOAD_BYTES']
    if len(data) > max_bytes:
        raise UploadValidationError(f"File size must be less than {max_bytes // (1024 * 1024)}MB")

    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError):
        raise UploadValidationError("The uploaded file is not a readable image")

    return width, height, accepted[content_type]


def upload_image(user_id, content_type, data, size_id=None):
    """
    Validates and stores an image for the kit builder.
    A low resolution for the selected size yields quality_warning but the
    upload still goes through.
    """
    try:
        width, height, extension = validate_upload(content_type, data)
    except UploadValidationError as e:
        return {"success": False, "error": e.message, "field": e.field}, 400

    quality_warning = None
    if size_id:
        size = find_size(size_id)
        if size is None:
            return {"success": False, "error": f"Unknown size '{size_id}'.", "field": "size"}, 400
        quality_warning = check_image_quality(width, height, size)

    # The stored name is random; the extension follows the validated content type.
    path = f"{user_id}/{secrets.token_hex(8)}.{extension}"
    bucket_name = current_app.config['STORAGE_BUCKET']

    try:
        bucket = get_storage_client().storage.from_(bucket_name)
        bucket.upload(path, data, {"content-type": content_type})
        public_url = bucket.get_public_url(path)
    except Exception as e:
        current_app.logger.error(f"Upload failed for {user_id}: {str(e)}")
        return {"success": False, "error": "An error occurred while uploading"}, 500

    current_app.logger.info(f"Uploaded {path} ({width}x{height})")
    return {
        "success": True,
        "data": {
            "image_url": public_url,
            "image_path": path,
            "width": width,
            "height": height,
            "quality_warning": quality_warning,
        }
    }


def delete_image(user_id, path):
    """Removes an uploaded image; callers may only delete under their own prefix."""
    if not path:
        return {"success": False, "error": "Missing image path."}, 400

    if not path.startswith(f"{user_id}/") or '..' in path:
        return {"success": False, "error": "Permission denied for this image."}, 403

    try:
        get_storage_client().storage.from_(current_app.config['STORAGE_BUCKET']).remove([path])
    except Exception as e:
        current_app.logger.error(f"Image removal failed for {path}: {str(e)}")
        return {"success": False, "error": "An error occurred while removing the image"}, 500

    return {"success": True, "message": "Image removed."}
