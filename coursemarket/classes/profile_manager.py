from flask import current_app
from sqlalchemy.exc import IntegrityError

from coursemarket.models import db, Profile
from coursemarket.models.profiles import PROFILE_ROLES
from coursemarket.classes.authorization import require, READ, WRITE
from coursemarket.classes.errors import EmailTaken, InvalidInput, NotFound, Unauthorized
from coursemarket.classes.storage import transactional
from coursemarket.classes.validators import clean_text, require_text

PROFILE_FIELDS = ("full_name", "bio", "avatar_url")


class ProfileManager:
    @staticmethod
    @transactional
    def register(email, password, full_name, role="student"):
        email = require_text("Email", email).lower()
        if "@" not in email:
            raise InvalidInput("Email is not valid.")
        if not password or len(password) < 8:
            raise InvalidInput("Password must be at least 8 characters.")
        if role not in PROFILE_ROLES:
            raise InvalidInput(f"Role must be one of: {', '.join(PROFILE_ROLES)}.")

        if Profile.query.filter_by(email=email).first():
            raise EmailTaken()

        profile = Profile(email=email, full_name=require_text("Full name", full_name), role=role)
        profile.set_password(password)

        db.session.add(profile)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise EmailTaken()

        current_app.logger.info("Profile %s registered as %s", profile.id, role)
        return profile

    @staticmethod
    @transactional
    def authenticate(email, password):
        profile = Profile.query.filter_by(email=(email or "").strip().lower()).first()
        if not profile or not profile.check_password(password or ""):
            raise Unauthorized("profile")
        return profile

    @staticmethod
    @transactional
    def get_profile(actor, profile_id):
        require(actor, READ, Profile(id=profile_id), "profile")
        profile = db.session.get(Profile, profile_id) if profile_id else None
        if profile is None:
            raise NotFound("profile")
        return profile

    @staticmethod
    @transactional
    def update_profile(actor, profile_id, data):
        """Only display fields change; email and role are fixed at signup."""
        require(actor, WRITE, Profile(id=profile_id), "profile")
        profile = db.session.get(Profile, profile_id) if profile_id else None
        if profile is None:
            raise NotFound("profile")

        if "full_name" in data:
            profile.full_name = require_text("Full name", data["full_name"])
        if "bio" in data:
            profile.bio = clean_text(data["bio"]) or None
        if "avatar_url" in data:
            profile.avatar_url = data["avatar_url"] or None

        db.session.commit()
        return profile
