# app/services/competitions.py
"""
Competition, gallery and voting services.

Uniqueness is enforced by the database:
- competition_submissions (competition_id, submission_id)
- votes (user_id, submission_id)
An IntegrityError is a 409 with a domain error_code only when the
conflicting row is actually there on re-read; any other constraint
failure is a 500.
"""

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from app import db
from app.models import Competition, CompetitionSubmission, GallerySubmission, Vote
from app.utils.general import utcnow, to_naive_utc

UPCOMING = 'upcoming'
ACTIVE = 'active'
ENDED = 'ended'

ALREADY_SUBMITTED = 'ALREADY_SUBMITTED'
ALREADY_VOTED = 'ALREADY_VOTED'


def competition_status(competition, now=None):
    """
    upcoming: now < start_date
    active:   start_date <= now <= end_date and is_active
    ended:    otherwise
    """
    now = to_naive_utc(now) if now is not None else utcnow()
    start_date = to_naive_utc(competition.start_date)
    end_date = to_naive_utc(competition.end_date)

    if now < start_date:
        return UPCOMING
    if start_date <= now <= end_date and competition.is_active:
        return ACTIVE
    return ENDED


def _competition_dict(competition, now):
    data = competition.to_dict()
    data['status'] = competition_status(competition, now)
    return data


def list_competitions(now=None):
    try:
        competitions = Competition.query.order_by(Competition.start_date.desc()).all()
        return {"success": True, "data": [_competition_dict(c, now) for c in competitions]}
    except Exception as e:
        current_app.logger.error(f"Error fetching competitions: {str(e)}")
        return {"success": False, "error": f"Failed to load competitions: {str(e)}"}, 500


def _vote_counts(submission_ids):
    if not submission_ids:
        return {}
    rows = db.session.query(Vote.submission_id, func.count(Vote.id)).filter(
        Vote.submission_id.in_(submission_ids)
    ).group_by(Vote.submission_id).all()
    return {submission_id: count for submission_id, count in rows}


def get_competition_board(competition_id, user=None, now=None):
    """
    Competition details plus its entries, each with its gallery piece,
    vote_count and user_voted (always False for anonymous callers).
    """
    try:
        competition = db.session.get(Competition, competition_id)
        if competition is None:
            return {"success": False, "error": "Competition not found."}, 404

        entries = CompetitionSubmission.query.filter_by(
            competition_id=competition_id
        ).order_by(CompetitionSubmission.created_at.asc()).all()

        entry_ids = [entry.id for entry in entries]
        counts = _vote_counts(entry_ids)

        my_votes = set()
        if user is not None and entry_ids:
            my_votes = {
                submission_id for (submission_id,) in db.session.query(Vote.submission_id).filter(
                    Vote.user_id == user.id,
                    Vote.submission_id.in_(entry_ids)
                ).all()
            }

        submissions = []
        for entry in entries:
            data = entry.to_dict()
            data['vote_count'] = counts.get(entry.id, 0)
            data['user_voted'] = entry.id in my_votes
            submissions.append(data)

        return {
            "success": True,
            "data": {
                "competition": _competition_dict(competition, now),
                "submissions": submissions,
            }
        }
    except Exception as e:
        current_app.logger.error(f"Error fetching competition {competition_id}: {str(e)}")
        return {"success": False, "error": f"Failed to load gallery: {str(e)}"}, 500


def list_gallery():
    try:
        pieces = GallerySubmission.query.filter_by(is_approved=True).order_by(
            GallerySubmission.created_at.desc()
        ).all()
        return {"success": True, "data": [piece.to_dict() for piece in pieces]}
    except Exception as e:
        return {"success": False, "error": f"Failed to load gallery: {str(e)}"}, 500


def list_eligible_gallery(user_id):
    """The caller's approved gallery pieces, i.e. what they may enter into a competition."""
    try:
        pieces = GallerySubmission.query.filter_by(user_id=user_id, is_approved=True).order_by(
            GallerySubmission.created_at.desc()
        ).all()
        return {"success": True, "data": [piece.to_dict() for piece in pieces]}
    except Exception as e:
        return {"success": False, "error": f"Failed to load your gallery: {str(e)}"}, 500


def submit_to_competition(user, competition_id, submission_id, now=None):
    """
    Enters one of the caller's approved gallery pieces into an active
    competition. A second attempt for the same piece returns 409
    ALREADY_SUBMITTED.
    """
    if not submission_id:
        return {"success": False, "error": "Missing submission_id."}, 400

    competition = db.session.get(Competition, competition_id)
    if competition is None:
        return {"success": False, "error": "Competition not found."}, 404

    if competition_status(competition, now) != ACTIVE:
        return {"success": False, "error": "This competition is not accepting entries."}, 400

    piece = db.session.get(GallerySubmission, submission_id)
    if piece is None or piece.user_id != user.id:
        return {"success": False, "error": "Gallery submission not found."}, 404

    if not piece.is_approved:
        return {"success": False, "error": "Only approved artwork can be entered into a competition."}, 400

    try:
        entry = CompetitionSubmission(
            competition_id=competition.id,
            submission_id=piece.id,
            user_id=user.id,
        )
        db.session.add(entry)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        already_entered = CompetitionSubmission.query.filter_by(
            competition_id=competition.id, submission_id=piece.id
        ).first() is not None
        if not already_entered:
            current_app.logger.error(f"Error submitting to competition: {str(e)}")
            return {"success": False, "error": "Failed to submit to competition."}, 500
        return {
            "success": False,
            "error": "This artwork has already been submitted to this competition",
            "error_code": ALREADY_SUBMITTED,
        }, 409
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error submitting to competition: {str(e)}")
        return {"success": False, "error": f"Failed to submit to competition: {str(e)}"}, 500

    current_app.logger.info(f"User {user.id} entered {piece.id} into competition {competition.id}")
    return {"success": True, "data": entry.to_dict()}


def cast_vote(user, submission_id):
    """
    Records one vote by the caller for a competition entry. A second vote
    returns 409 ALREADY_VOTED.

    vote_count in the response is the count observed before the insert plus
    one; it is not re-read afterwards.
    """
    entry = db.session.get(CompetitionSubmission, submission_id)
    if entry is None:
        return {"success": False, "error": "Submission not found."}, 404

    try:
        previous_count = db.session.query(func.count(Vote.id)).filter(
            Vote.submission_id == entry.id
        ).scalar() or 0

        db.session.add(Vote(user_id=user.id, submission_id=entry.id))
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        already_voted = Vote.query.filter_by(user_id=user.id, submission_id=submission_id).first() is not None
        if not already_voted:
            current_app.logger.error(f"Error voting: {str(e)}")
            return {"success": False, "error": "Failed to vote."}, 500
        return {
            "success": False,
            "error": "You have already voted for this submission",
            "error_code": ALREADY_VOTED,
        }, 409
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error voting: {str(e)}")
        return {"success": False, "error": f"Failed to vote: {str(e)}"}, 500

    return {
        "success": True,
        "data": {
            "submission_id": entry.id,
            "vote_count": previous_count + 1,
            "user_voted": True,
        }
    }
