# app/services/inventory.py
"""
Zoho Inventory client.

Backs the /api/inventory proxy and the inventory outbox. Every call
exchanges the configured refresh token for a short-lived access token and
then performs a single create request. Nothing here retries.
"""

from datetime import date, timedelta
import requests
from flask import current_app


class InventoryError(Exception):
    """Raised for missing credentials, bad requests and upstream failures."""
    def __init__(self, message, original_error=None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


SUPPORTED_ACTIONS = ('createItem', 'createSalesOrder')


def _require_config(*names):
    config = current_app.config
    missing = [name for name in names if not config.get(name)]
    if missing:
        raise InventoryError(f"Missing inventory credentials in configuration: {', '.join(missing)}")
    return [config[name] for name in names]


def _auth_headers(access_token):
    return {
        'Authorization': f'Zoho-oauthtoken {access_token}',
        'Content-Type': 'application/json',
    }


def _api_url(path):
    (organization_id,) = _require_config('ZOHO_ORGANIZATION_ID')
    base = current_app.config['ZOHO_API_BASE'].rstrip('/')
    return f"{base}/{path}", {'organization_id': organization_id}


def _timeout():
    return current_app.config.get('ZOHO_TIMEOUT', 15)


def get_access_token():
    """Exchanges the refresh token for an access token."""
    client_id, client_secret, refresh_token = _require_config(
        'ZOHO_CLIENT_ID', 'ZOHO_CLIENT_SECRET', 'ZOHO_REFRESH_TOKEN'
    )

    try:
        response = requests.post(
            current_app.config['ZOHO_TOKEN_URL'],
            data={
                'refresh_token': refresh_token,
                'client_id': client_id,
                'client_secret': client_secret,
                'grant_type': 'refresh_token',
            },
            timeout=_timeout(),
        )
    except requests.exceptions.RequestException as e:
        raise InventoryError(f"Failed to get inventory access token: {str(e)}", original_error=e)

    if not response.ok:
        raise InventoryError(f"Failed to get inventory access token: {response.reason}")

    access_token = response.json().get('access_token')
    if not access_token:
        raise InventoryError("Inventory token response did not include an access token")
    return access_token


def create_item(access_token, item_data):
    """Creates an inventory item: {name, sku, rate}."""
    for field in ('name', 'sku', 'rate'):
        if item_data.get(field) in (None, ''):
            raise InventoryError(f"Missing '{field}' for createItem")

    url, params = _api_url('items')
    body = {
        'name': item_data['name'],
        'sku': item_data['sku'],
        'rate': item_data['rate'],
        'account_id': current_app.config.get('ZOHO_SALES_ACCOUNT_ID'),
        'tax_id': current_app.config.get('ZOHO_TAX_ID'),
        'item_type': 'inventory',
        'product_type': 'goods',
        'is_taxable': True,
        'tax_percentage': current_app.config['INVENTORY_TAX_PERCENTAGE'],
    }

    try:
        response = requests.post(url, params=params, json=body,
                                 headers=_auth_headers(access_token), timeout=_timeout())
    except requests.exceptions.RequestException as e:
        raise InventoryError(f"Failed to create inventory item: {str(e)}", original_error=e)

    if not response.ok:
        raise InventoryError(f"Failed to create inventory item: {response.reason} - {response.text}")

    return response.json()


def _address(shipping_address):
    return {
        'address': shipping_address.get('address'),
        'city': shipping_address.get('city'),
        'state': shipping_address.get('state'),
        'zip': shipping_address.get('zip'),
        'country': shipping_address.get('country'),
    }


def _find_or_create_customer(access_token, customer_name, address):
    url, params = _api_url('contacts')
    headers = _auth_headers(access_token)

    try:
        response = requests.post(url, params=params, headers=headers, timeout=_timeout(), json={
            'contact_name': customer_name,
            'contact_type': 'customer',
            'billing_address': address,
            'shipping_address': address,
        })
        if response.ok:
            return response.json()['contact']['contact_id']

        # The contact probably exists already; look it up by name.
        search = requests.get(url, params={**params, 'contact_name': customer_name},
                              headers=headers, timeout=_timeout())
    except requests.exceptions.RequestException as e:
        raise InventoryError(f"Failed to create or find customer: {str(e)}", original_error=e)

    if search.ok:
        contacts = search.json().get('contacts') or []
        if contacts:
            return contacts[0]['contact_id']

    raise InventoryError("Failed to create or find customer in inventory system")


def create_sales_order(access_token, order_data, today=None):
    """
    Creates (or reuses) the customer contact, then a sales order shipping
    INVENTORY_SHIPMENT_LEAD_DAYS after today.
    """
    customer_name = order_data.get('customer_name')
    line_items = order_data.get('line_items') or []
    shipping_address = order_data.get('shipping_address') or {}

    if not customer_name:
        raise InventoryError("Missing 'customer_name' for createSalesOrder")
    if not line_items:
        raise InventoryError("Missing 'line_items' for createSalesOrder")

    address = _address(shipping_address)
    customer_id = _find_or_create_customer(access_token, customer_name, address)

    today = today or date.today()
    lead_days = current_app.config['INVENTORY_SHIPMENT_LEAD_DAYS']
    url, params = _api_url('salesorders')
    body = {
        'customer_id': customer_id,
        'date': today.isoformat(),
        'shipment_date': (today + timedelta(days=lead_days)).isoformat(),
        'line_items': [
            {
                'item_id': item.get('item_id'),
                'rate': item.get('rate'),
                'quantity': item.get('quantity'),
            }
            for item in line_items
        ],
        'shipping_address': address,
    }

    try:
        response = requests.post(url, params=params, json=body,
                                 headers=_auth_headers(access_token), timeout=_timeout())
    except requests.exceptions.RequestException as e:
        raise InventoryError(f"Failed to create sales order: {str(e)}", original_error=e)

    if not response.ok:
        raise InventoryError(f"Failed to create sales order: {response.reason} - {response.text}")

    return response.json()


def perform_action(action, data):
    """Runs one proxy action and returns the upstream response body."""
    if action not in SUPPORTED_ACTIONS:
        raise InventoryError(f"Unknown action: {action}")
    if not isinstance(data, dict):
        raise InventoryError("Request 'data' must be an object")

    access_token = get_access_token()

    if action == 'createItem':
        return create_item(access_token, data)
    return create_sales_order(access_token, data)


def handle_proxy_request(payload):
    """
    Service entry point for POST /api/inventory.
    Every failure, including missing credentials, is a 400 with no partial result.
    """
    try:
        result = perform_action(payload.get('action'), payload.get('data'))
        return {"success": True, "data": result}
    except InventoryError as e:
        current_app.logger.error(f"Inventory integration error: {e.message}")
        return {"success": False, "error": e.message}, 400
    except Exception as e:
        current_app.logger.error(f"Unexpected inventory integration error: {str(e)}", exc_info=True)
        return {"success": False, "error": str(e) or "Unknown error occurred"}, 400
