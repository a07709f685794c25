# app/services/inventory_sync.py
"""
Inventory outbox.

New product variants are mirrored into the inventory system through
InventorySyncTask rows written in the same transaction as the variant.
Dispatching is best-effort: failures are logged and recorded on the task,
never raised to the workflow that created the variant.
"""

from flask import current_app, has_request_context, after_this_request
from app import db
from app.models import InventorySyncTask
from app.services.inventory import perform_action, InventoryError
from app.utils.general import utcnow


def build_item_payload(size, frame, rate):
    prefix = current_app.config['INVENTORY_SKU_PREFIX']
    return {
        'name': f"ChartedArt Kit - {size['name']} - {frame['name']}",
        'sku': f"{prefix}-{size['id']}-{frame['id'].upper()}",
        'rate': rate,
    }


def enqueue_create_item(product, size, frame):
    """Adds a createItem task to the current session; the caller commits."""
    task = InventorySyncTask(
        action='createItem',
        payload=build_item_payload(size, frame, product.base_price),
        product_id=product.id,
        status='pending',
    )
    db.session.add(task)
    return task


def _external_id(result):
    if not isinstance(result, dict):
        return None
    item = result.get('item') or {}
    external_id = item.get('item_id')
    return str(external_id) if external_id is not None else None


def _push(task_id):
    """
    Loads the task and calls the inventory system.

    Returns:
        tuple: (should_record, result, error_message)
    """
    task = db.session.get(InventorySyncTask, task_id)
    if task is None or task.status == 'sent':
        return False, None, None

    action, payload = task.action, task.payload

    try:
        return True, perform_action(action, payload), None
    except InventoryError as e:
        current_app.logger.warning(
            f"Inventory sync failed for {payload.get('sku')}: {e.message}"
        )
        return True, None, e.message
    except Exception as e:
        current_app.logger.warning(
            f"Inventory sync error for task {task_id}: {str(e)}", exc_info=True
        )
        return True, None, str(e) or e.__class__.__name__


def dispatch_task(task_id):
    """
    Pushes one task to the inventory system and records the outcome on the
    row: 'sent' with external_id, or 'failed' with last_error. Every attempt
    increments attempts. Returns True when sent. Never raises.
    """
    try:
        should_record, result, error = _push(task_id)
        if not should_record:
            return False

        task = db.session.get(InventorySyncTask, task_id)
        task.attempts = (task.attempts or 0) + 1
        task.processed_at = utcnow()

        if error is None:
            task.status = 'sent'
            task.last_error = None
            task.external_id = _external_id(result)
        else:
            task.status = 'failed'
            task.last_error = error[:1000]

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.warning(
            f"Could not record inventory sync outcome for task {task_id}: {str(e)}", exc_info=True
        )
        return False

    if error is None:
        current_app.logger.info(f"Inventory sync created item {task.payload.get('sku')}")
    return error is None


def dispatch_after_response(task_id):
    """
    Schedules dispatch_task to run once the current response has been sent,
    so the request never waits on the inventory system.

    Outside of a request the task stays queued for `flask inventory-sync`.
    Returns True when the dispatch was scheduled.
    """
    if not has_request_context():
        return False

    app = current_app._get_current_object()

    def _dispatch():
        with app.app_context():
            dispatch_task(task_id)

    @after_this_request
    def _register(response):
        response.call_on_close(_dispatch)
        return response

    return True


def dispatch_pending(limit=50):
    """Drains pending and failed tasks, oldest first."""
    task_ids = [
        task_id for (task_id,) in db.session.query(InventorySyncTask.id)
        .filter(InventorySyncTask.status.in_(['pending', 'failed']))
        .order_by(InventorySyncTask.created_at.asc())
        .limit(limit)
        .all()
    ]

    summary = {"sent": 0, "failed": 0}
    for task_id in task_ids:
        if dispatch_task(task_id):
            summary["sent"] += 1
        else:
            summary["failed"] += 1
    return summary
