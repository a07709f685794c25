# app/services/realtime.py
"""
In-process change notification feed.

Mirrors what the Supabase realtime channel gives the SPA: subscribers are
told that a row in a table was inserted, updated or deleted, with no other
payload guarantee. Changes are collected when the session flushes and only
published after the transaction commits; rolled back work is dropped.

Callbacks run in the committing thread, outside of any transaction. They
must not use the database session; hand the event off (ChangeStream does
this with a queue) and recompute elsewhere.
"""

import itertools
import logging
import queue
import threading
from dataclasses import dataclass

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

INSERT = 'INSERT'
UPDATE = 'UPDATE'
DELETE = 'DELETE'

_PENDING_KEY = 'realtime_pending_changes'


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    type: str
    row_id: object = None


class Subscription:
    """Handle returned by ChangeFeed.subscribe; cancel() is idempotent."""

    def __init__(self, feed, key, table):
        self._feed = feed
        self._key = key
        self.table = table
        self.active = True

    def cancel(self):
        if self.active:
            self.active = False
            self._feed._remove(self._key)


class ChangeStream:
    """
    Queue-backed view of a subscription for consumers that poll.

    wait() blocks until at least one change arrives (or the timeout passes)
    and then drains everything queued, so a burst of changes yields a
    single recompute.
    """

    def __init__(self, feed, table, predicate=None):
        self._queue = queue.Queue()
        self.subscription = feed.subscribe(table, self._queue.put, predicate)

    def wait(self, timeout=None):
        try:
            events = [self._queue.get(timeout=timeout)]
        except queue.Empty:
            return []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def close(self):
        self.subscription.cancel()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class ChangeFeed:
    """Fans committed row changes out to table subscribers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count()
        self._subscribers = {}

    def subscribe(self, table, callback, predicate=None):
        key = next(self._ids)
        with self._lock:
            self._subscribers[key] = (table, callback, predicate)
        return Subscription(self, key, table)

    def watch(self, table, predicate=None):
        return ChangeStream(self, table, predicate)

    def subscriber_count(self, table=None):
        with self._lock:
            return sum(1 for t, _, _ in self._subscribers.values() if table is None or t == table)

    def _remove(self, key):
        with self._lock:
            self._subscribers.pop(key, None)

    def publish(self, change):
        with self._lock:
            targets = [
                (callback, predicate)
                for table, callback, predicate in self._subscribers.values()
                if table == change.table
            ]
        for callback, predicate in targets:
            try:
                if predicate is None or predicate(change):
                    callback(change)
            except Exception:
                logger.exception("Change subscriber failed for %s %s", change.type, change.table)


change_feed = ChangeFeed()


def _table_name(obj):
    return inspect(obj).mapper.local_table.name


def _row_id(obj):
    # The identity key is not assigned yet inside after_flush; read the
    # primary key columns off the instance instead.
    key = inspect(obj).mapper.primary_key_from_instance(obj)
    return key[0] if len(key) == 1 else tuple(key)


@event.listens_for(Session, 'after_flush')
def _collect_changes(session, flush_context):
    pending = session.info.setdefault(_PENDING_KEY, [])
    for obj in session.new:
        pending.append(ChangeEvent(_table_name(obj), INSERT, _row_id(obj)))
    for obj in session.dirty:
        if session.is_modified(obj, include_collections=False):
            pending.append(ChangeEvent(_table_name(obj), UPDATE, _row_id(obj)))
    for obj in session.deleted:
        pending.append(ChangeEvent(_table_name(obj), DELETE, _row_id(obj)))


@event.listens_for(Session, 'after_commit')
def _publish_changes(session):
    pending = session.info.pop(_PENDING_KEY, [])
    for change in pending:
        change_feed.publish(change)


@event.listens_for(Session, 'after_rollback')
def _discard_changes(session):
    session.info.pop(_PENDING_KEY, None)
