# app/services/community.py
# Initiatives, events, RSVPs and collage submissions.

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from app import db
from app.models import Initiative, Event, EventRSVP, CollageSubmission
from app.utils.general import utcnow, to_naive_utc

RSVP_STATUSES = ('attending', 'interested', 'not_attending')


def _attending_counts(event_ids):
    """Attending RSVP count per event id, fetched in one grouped query."""
    if not event_ids:
        return {}
    rows = db.session.query(EventRSVP.event_id, func.count(EventRSVP.id)).filter(
        EventRSVP.event_id.in_(event_ids),
        EventRSVP.status == 'attending'
    ).group_by(EventRSVP.event_id).all()
    return {event_id: count for event_id, count in rows}


def _attending_count(event_id):
    return db.session.query(func.count(EventRSVP.id)).filter(
        EventRSVP.event_id == event_id,
        EventRSVP.status == 'attending'
    ).scalar() or 0


def list_initiatives():
    """Active initiatives, newest first, with their approved collage count."""
    try:
        initiatives = Initiative.query.filter_by(status='active').order_by(
            Initiative.created_at.desc()
        ).all()

        ids = [initiative.id for initiative in initiatives]
        counts = {}
        if ids:
            counts = dict(db.session.query(
                CollageSubmission.initiative_id, func.count(CollageSubmission.id)
            ).filter(
                CollageSubmission.initiative_id.in_(ids),
                CollageSubmission.is_approved.is_(True)
            ).group_by(CollageSubmission.initiative_id).all())

        data = []
        for initiative in initiatives:
            item = initiative.to_dict()
            item['collage_count'] = counts.get(initiative.id, 0)
            data.append(item)

        return {"success": True, "data": data}
    except Exception as e:
        current_app.logger.error(f"Error fetching initiatives: {str(e)}")
        return {"success": False, "error": f"Failed to load initiatives: {str(e)}"}, 500


def get_initiative(initiative_id, user=None):
    try:
        initiative = db.session.get(Initiative, initiative_id)
        if initiative is None:
            return {"success": False, "error": "Initiative not found."}, 404

        collages = CollageSubmission.query.filter_by(
            initiative_id=initiative_id, is_approved=True
        ).order_by(CollageSubmission.created_at.desc()).all()

        rsvp_count = 0
        user_rsvp = None
        if initiative.related_event_id:
            rsvp_count = _attending_count(initiative.related_event_id)
            if user is not None:
                user_rsvp = EventRSVP.query.filter_by(
                    event_id=initiative.related_event_id, user_id=user.id
                ).first()

        return {
            "success": True,
            "data": {
                "initiative": initiative.to_dict(),
                "submissions": [collage.to_dict() for collage in collages],
                "rsvp_count": rsvp_count,
                "user_rsvp": user_rsvp.to_dict() if user_rsvp else None,
            }
        }
    except Exception as e:
        current_app.logger.error(f"Error fetching initiative details: {str(e)}")
        return {"success": False, "error": f"Failed to load initiative details: {str(e)}"}, 500


def list_events(now=None):
    """
    Approved events from now on, soonest first. Events linked to an
    initiative carry the initiative summary and an attending rsvp_count.
    """
    now = to_naive_utc(now) if now is not None else utcnow()
    try:
        events = Event.query.filter(
            Event.is_approved.is_(True),
            Event.event_date >= now
        ).order_by(Event.event_date.asc()).all()

        counts = _attending_counts([event.id for event in events if event.initiative_id])

        data = []
        for event in events:
            item = event.to_dict()
            if event.initiative is not None:
                item['initiative'] = {'id': event.initiative.id, 'title': event.initiative.title}
                item['rsvp_count'] = counts.get(event.id, 0)
            data.append(item)

        return {"success": True, "data": data}
    except Exception as e:
        current_app.logger.error(f"Error fetching events: {str(e)}")
        return {"success": False, "error": f"Failed to load events: {str(e)}"}, 500


def set_rsvp(user, event_id, status):
    """
    Creates or updates the caller's RSVP for an event (one per user per
    event, status changed in place).
    """
    if status not in RSVP_STATUSES:
        return {
            "success": False,
            "error": f"Invalid RSVP status '{status}'. Expected one of: {', '.join(RSVP_STATUSES)}."
        }, 400

    event = db.session.get(Event, event_id)
    if event is None:
        return {"success": False, "error": "Event not found."}, 404

    try:
        rsvp = EventRSVP.query.filter_by(event_id=event_id, user_id=user.id).first()
        if rsvp is None:
            try:
                rsvp = EventRSVP(event_id=event_id, user_id=user.id, status=status)
                db.session.add(rsvp)
                db.session.commit()
            except IntegrityError:
                # Created by a concurrent request; update that row instead.
                db.session.rollback()
                rsvp = EventRSVP.query.filter_by(event_id=event_id, user_id=user.id).one()
                rsvp.status = status
                db.session.commit()
        else:
            rsvp.status = status
            db.session.commit()

        return {
            "success": True,
            "data": {
                "rsvp": rsvp.to_dict(),
                "rsvp_count": _attending_count(event_id),
            }
        }
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating RSVP: {str(e)}")
        return {"success": False, "error": f"Failed to update RSVP: {str(e)}"}, 500


def submit_collage(user, initiative_id, image_url, description=None):
    """One collage per user per initiative; new collages await approval."""
    if not image_url:
        return {"success": False, "error": "Missing image_url."}, 400

    initiative = db.session.get(Initiative, initiative_id)
    if initiative is None:
        return {"success": False, "error": "Initiative not found."}, 404

    try:
        collage = CollageSubmission(
            initiative_id=initiative_id,
            user_id=user.id,
            image_url=image_url,
            description=description,
        )
        db.session.add(collage)
        db.session.commit()
        return {"success": True, "data": collage.to_dict()}
    except IntegrityError as e:
        db.session.rollback()
        already_submitted = CollageSubmission.query.filter_by(
            initiative_id=initiative_id, user_id=user.id
        ).first() is not None
        if not already_submitted:
            current_app.logger.error(f"Error submitting collage: {str(e)}")
            return {"success": False, "error": "Failed to submit collage."}, 500
        return {
            "success": False,
            "error": "You have already submitted a collage for this initiative",
            "error_code": "ALREADY_SUBMITTED",
        }, 409
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error submitting collage: {str(e)}")
        return {"success": False, "error": f"Failed to submit collage: {str(e)}"}, 500
