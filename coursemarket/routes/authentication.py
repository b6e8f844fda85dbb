from flask import Blueprint, current_app, g, jsonify, make_response, request
from coursemarket.classes.profile_manager import ProfileManager
from coursemarket.utils.tokens import get_jwt_token
from coursemarket.utils.utils import COOKIE_NAME, login_required

auth_bp = Blueprint('auth_bp', __name__)


def _set_token_cookie(response, token, max_age):
    response.set_cookie(
        COOKIE_NAME, token,
        httponly=True,
        secure=current_app.config.get("AUTH_COOKIE_SECURE", True),
        samesite=current_app.config.get("AUTH_COOKIE_SAMESITE", "None"),
        path="/",
        max_age=max_age
    )
    return response


# Login
@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    profile = ProfileManager.authenticate(data.get("email"), data.get("password"))

    token = get_jwt_token({
        "user_id": profile.id,
        "email": profile.email,
        "role": profile.role,
    })

    response = make_response(jsonify({
        "message": "Login successful",
        "user": profile.to_dict()
    }))
    max_age = current_app.config.get("JWT_EXPIRATION_HOURS", 24) * 3600
    return _set_token_cookie(response, token, max_age)

# Logout
@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = make_response(jsonify({"message": "Logout successful"}))
    return _set_token_cookie(response, "", 0)

# Register
@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}

    profile = ProfileManager.register(
        email=data.get('email'),
        password=data.get('password'),
        full_name=data.get('full_name'),
        role=data.get('role', 'student'),
    )

    return jsonify({"message": "User registered successfully!", "user": profile.to_dict()}), 201

# Auth Check
@auth_bp.route('/check-auth', methods=['GET'])
@login_required
def check_auth():
    return jsonify({
        "message": "Authenticated",
        "user": {"id": g.actor.id, "role": g.actor.role}
    }), 200

# Profiles
@auth_bp.route('/profiles/<profile_id>', methods=['GET'])
@login_required
def get_profile(profile_id):
    profile = ProfileManager.get_profile(g.actor, profile_id)
    return jsonify(profile.to_dict()), 200

@auth_bp.route('/profiles/<profile_id>', methods=['PUT'])
@login_required
def update_profile(profile_id):
    data = request.get_json(silent=True) or {}
    profile = ProfileManager.update_profile(g.actor, profile_id, data)
    return jsonify({"message": "Profile updated successfully", "user": profile.to_dict()}), 200
