# app/services/orders.py
# Admin order services. Callers are gated by admin_required in app/api/admin.py.

from flask import current_app
from sqlalchemy.orm import selectinload
from app import db
from app.models import Order, OrderItem
from app.utils.general import utcnow

# Flat set: any status may move to any other.
ORDER_STATUSES = ('pending', 'processing', 'shipped', 'delivered', 'cancelled')


def list_orders():
    """All orders, newest first, with their line items and customer profile."""
    try:
        orders = Order.query.options(
            selectinload(Order.order_items).joinedload(OrderItem.product)
        ).order_by(Order.created_at.desc()).all()
        return {"success": True, "data": [order.to_dict() for order in orders]}
    except Exception as e:
        current_app.logger.error(f"Error fetching orders: {str(e)}")
        return {"success": False, "error": f"Failed to fetch orders: {str(e)}"}, 500


def set_order_status(order_id, new_status):
    """Moves an order to new_status and stamps updated_at."""
    if new_status not in ORDER_STATUSES:
        return {
            "success": False,
            "error": f"Invalid status '{new_status}'. Expected one of: {', '.join(ORDER_STATUSES)}."
        }, 400

    try:
        order = db.session.get(Order, order_id)
        if order is None:
            return {"success": False, "error": "Order not found."}, 404

        previous_status = order.status
        order.status = new_status
        order.updated_at = utcnow()
        db.session.commit()

        current_app.logger.info(f"Order {order_id} status: {previous_status} → {new_status}")
        return {"success": True, "data": order.to_dict(include_items=False)}
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating order status: {str(e)}")
        return {"success": False, "error": f"Failed to update order status: {str(e)}"}, 500
