# app/services/jit_provisioning.py
"""
Just-in-Time Profile Provisioning Service

Ensures that authenticated users (verified via Supabase JWT) have a row in
the profiles table, so carts, orders and submissions can reference them.

Sync Strategy:
- Look the profile up by the UUID from the JWT 'sub' claim (primary key)
- Insert it on first sight, refresh email/full_name when the claims change
- Fail authentication if provisioning fails (strict mode)
"""

from flask import current_app
from app import db
from app.models import Profile
from app.utils.general import utcnow
from sqlalchemy.exc import IntegrityError, OperationalError


class JITProvisioningError(Exception):
    """Custom exception for JIT provisioning failures"""
    def __init__(self, message, original_error=None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


def ensure_profile_synced(user_id, email, full_name):
    """
    Ensures a profile exists for user_id and its metadata matches the token.

    Returns:
        Profile: The synchronized Profile ORM object

    Raises:
        JITProvisioningError: If database sync fails
    """
    try:
        profile = db.session.get(Profile, user_id)

        if profile is None:
            current_app.logger.info(
                f"JIT Provisioning: Creating profile for {email} (ID: {user_id})"
            )

            try:
                profile = Profile(id=user_id, email=email, full_name=full_name)
                db.session.add(profile)
                db.session.commit()
                return profile

            except IntegrityError as e:
                # Another request created the profile first
                db.session.rollback()
                current_app.logger.warning(
                    f"JIT Provisioning: Race condition detected for {email}. "
                    f"Retrying query. Error: {str(e)}"
                )

                profile = db.session.get(Profile, user_id)
                if profile is None:
                    raise JITProvisioningError(
                        f"Failed to create profile for {email} due to integrity constraint",
                        original_error=e
                    )

        changes = []

        if profile.email != email:
            changes.append(f"email: {profile.email} → {email}")
            profile.email = email

        if full_name and profile.full_name != full_name:
            changes.append(f"full_name: {profile.full_name} → {full_name}")
            profile.full_name = full_name

        if changes:
            current_app.logger.info(
                f"JIT Provisioning: Syncing profile {user_id}. Changes: {', '.join(changes)}"
            )
            profile.updated_at = utcnow()
            db.session.commit()

        return profile

    except OperationalError as e:
        db.session.rollback()
        current_app.logger.error(
            f"JIT Provisioning: Database connection error for {email}. Error: {str(e)}"
        )
        raise JITProvisioningError(
            "Database connection failed during profile provisioning",
            original_error=e
        )

    except JITProvisioningError:
        raise

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(
            f"JIT Provisioning: Unexpected error syncing {email}. Error: {str(e)}",
            exc_info=True
        )
        raise JITProvisioningError(
            f"Unexpected error during profile provisioning: {str(e)}",
            original_error=e
        )
