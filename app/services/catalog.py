# app/services/catalog.py
# Print sizes, frames and the image quality rules for the art-kit builder.

from flask import current_app


def get_sizes():
    return current_app.config['CATALOG_SIZES']


def get_frames():
    return current_app.config['CATALOG_FRAMES']


def find_size(size_id):
    return next((size for size in get_sizes() if size['id'] == size_id), None)


def find_frame(frame_id):
    return next((frame for frame in get_frames() if frame['id'] == frame_id), None)


def variant_price(size, frame):
    """Kit price for a (size, frame) selection."""
    return round(size['price'] + frame['price'], 2)


def get_catalog():
    return {
        "success": True,
        "data": {
            "sizes": get_sizes(),
            "frames": get_frames(),
        }
    }


def check_image_quality(width, height, size):
    """
    Returns a warning message when the image is too small to print well at
    the selected size, or None when it is fine.

    The smaller image dimension is compared with the size's min_pixels. When
    it falls short, the first catalog size the image does satisfy is
    recommended; if none qualifies a generic low resolution warning is given.
    A warning never blocks the upload.
    """
    smaller_dimension = min(width, height)

    if smaller_dimension >= size['min_pixels']:
        return None

    recommended = next(
        (candidate for candidate in get_sizes() if candidate['min_pixels'] <= smaller_dimension),
        None
    )

    if recommended:
        return (
            f"This image might be too small for {size['name']} prints. "
            f"We recommend using {recommended['name']} or smaller for best quality."
        )

    return (
        f"This image resolution ({width}x{height}) might be too low for high-quality prints. "
        f"We recommend using images with at least {size['min_pixels']}px for the smallest dimension."
    )
