from churchhub.extensions import db
from churchhub.models import User, Profile, TokenBlocklist


class UserRepository:
    @staticmethod
    def sign_up(user, profile):
        db.session.add(user)
        db.session.flush()
        profile.user_id = user.id
        db.session.add(profile)
        return user

    @staticmethod
    def find_by_email(email):
        return User.query.filter_by(email=email.strip().lower()).first()

    @staticmethod
    def find_by_id(user_id: int):
        return db.session.get(User, user_id)

    @staticmethod
    def find_profile(user_id: int):
        return Profile.query.filter_by(user_id=user_id).first()

    @staticmethod
    def find_profiles(user_ids):
        if not user_ids:
            return {}
        profiles = Profile.query.filter(Profile.user_id.in_(user_ids)).all()
        return {profile.user_id: profile for profile in profiles}

    @staticmethod
    def revoke_token(jti: str, user_id: int):
        db.session.add(TokenBlocklist(jti=jti, user_id=user_id))
        db.session.commit()

    @staticmethod
    def is_token_revoked(jti: str) -> bool:
        return TokenBlocklist.query.filter_by(jti=jti).first() is not None
