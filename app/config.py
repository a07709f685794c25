# config.py

import os
from dotenv import load_dotenv

# Get the base directory of the application
basedir = os.path.abspath(os.path.dirname(__file__))

# This line finds the .env file in your root directory and loads it.
load_dotenv(os.path.join(basedir, '..', '.env'))
# --------------------------------------


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Contains all the configuration variables for the application,
    including database, Supabase, inventory (Zoho) and catalog settings.
    """
    # --- Database Settings ---
    # Reads the database URL from the .env file.
    # Provides a default (e.g., for SQLite) if the variable isn't set.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'app.db')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- Secret Key ---
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # --- Supabase Settings ---
    # The JWT secret verifies access tokens issued by Supabase Auth.
    # The service role key is server-side only: it bypasses row level security.
    SUPABASE_URL = os.environ.get('SUPABASE_URL')
    SUPABASE_JWT_SECRET = os.environ.get('SUPABASE_JWT_SECRET')
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get('SUPABASE_SERVICE_ROLE_KEY')

    # --- File Storage ---
    STORAGE_BUCKET = os.environ.get('STORAGE_BUCKET') or 'uploads'
    MAX_UPLOAD_BYTES = int(os.environ.get('MAX_UPLOAD_BYTES') or 10 * 1024 * 1024)
    ACCEPTED_IMAGE_TYPES = {'image/jpeg': 'jpg', 'image/png': 'png'}

    # --- CORS ---
    CORS_ORIGINS = [
        origin.strip()
        for origin in (os.environ.get('CORS_ORIGINS') or 'http://localhost:5173,http://127.0.0.1:5173').split(',')
        if origin.strip()
    ]

    # --- Inventory (Zoho) Settings ---
    ZOHO_CLIENT_ID = os.environ.get('ZOHO_CLIENT_ID')
    ZOHO_CLIENT_SECRET = os.environ.get('ZOHO_CLIENT_SECRET')
    ZOHO_REFRESH_TOKEN = os.environ.get('ZOHO_REFRESH_TOKEN')
    ZOHO_ORGANIZATION_ID = os.environ.get('ZOHO_ORGANIZATION_ID')
    ZOHO_SALES_ACCOUNT_ID = os.environ.get('ZOHO_SALES_ACCOUNT_ID')
    ZOHO_TAX_ID = os.environ.get('ZOHO_TAX_ID')
    ZOHO_TOKEN_URL = os.environ.get('ZOHO_TOKEN_URL') or 'https://accounts.zoho.com/oauth/v2/token'
    ZOHO_API_BASE = os.environ.get('ZOHO_API_BASE') or 'https://www.zohoapis.com/inventory/v1'
    ZOHO_TIMEOUT = float(os.environ.get('ZOHO_TIMEOUT') or 15)

    # South African VAT and the standard shipment lead time.
    INVENTORY_TAX_PERCENTAGE = 15
    INVENTORY_SHIPMENT_LEAD_DAYS = 7
    INVENTORY_SKU_PREFIX = os.environ.get('INVENTORY_SKU_PREFIX') or 'CA'

    # When True, new variants are pushed once the response has been sent.
    # When False they are only queued; run `flask inventory-sync` to push them.
    INVENTORY_SYNC_INLINE = _env_flag('INVENTORY_SYNC_INLINE', True)

    # --- Realtime ---
    # Seconds between keep-alive comments on the cart count stream.
    CART_STREAM_HEARTBEAT = float(os.environ.get('CART_STREAM_HEARTBEAT') or 25)

    # --- CATALOG CONFIGURATION ---
    # Print sizes: price in ZAR, minPixels is the minimum smaller image
    # dimension for a 300 DPI print.
    CATALOG_SIZES = [
        {'id': 'A4', 'name': 'A4', 'dimensions': '210 × 297 mm', 'price': 499.99, 'min_pixels': 1748},
        {'id': 'A3', 'name': 'A3', 'dimensions': '297 × 420 mm', 'price': 699.99, 'min_pixels': 2480},
        {'id': 'A2', 'name': 'A2', 'dimensions': '420 × 594 mm', 'price': 899.99, 'min_pixels': 3508},
        {'id': 'A1', 'name': 'A1', 'dimensions': '594 × 841 mm', 'price': 1299.99, 'min_pixels': 4961},
        {'id': 'A0', 'name': 'A0', 'dimensions': '841 × 1189 mm', 'price': 1699.99, 'min_pixels': 7016},
    ]

    CATALOG_FRAMES = [
        {'id': 'none', 'name': 'No Frame', 'price': 0},
        {'id': 'standard', 'name': 'Standard Frame', 'price': 349.99},
        {'id': 'premium', 'name': 'Premium Frame', 'price': 699.99},
    ]
