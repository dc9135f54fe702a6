# fitplan/guards.py
from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt_identity, jwt_required

from .services.profiles import has_profile


def current_user_id() -> int:
    return int(get_jwt_identity())


def profile_required(fn):
    """
    jwt_required + an existing profile row. Users that signed up without
    finishing onboarding are sent there.
    """

    @wraps(fn)
    @jwt_required()
    def wrapper(*args, **kwargs):
        if not has_profile(current_user_id()):
            return (
                jsonify({"message": "Complete your profile first", "redirect": "/onboarding"}),
                403,
            )
        return fn(*args, **kwargs)

    return wrapper
