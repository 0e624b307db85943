"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with HS256,
  one key per token kind)
- Keeps exactly one valid refresh token per user (the slot on the users row) and rotates it
  on every refresh
- Tokens travel as httponly cookies and in the JSON body
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models import storage
from models.user import User
from models.schemas.user import UserRegisterSchema, UserOutSchema, UserLoginSchema
from .payload import json_payload
from utils.decorators import jwt_required, ACCESS_COOKIE
from utils.exceptions import ConflictError
from utils.security import hash_password

REFRESH_COOKIE = "refreshToken"

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()


def _sessions():
    return current_app.extensions["session_manager"]


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": current_app.config.get("COOKIE_SECURE", True),
        "samesite": "Lax",
    }


def _set_token_cookies(response, access_token: str, refresh_token: str):
    issuer = current_app.extensions["token_issuer"]
    options = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE, access_token,
        max_age=int(issuer.access_expires.total_seconds()), **options
    )
    response.set_cookie(
        REFRESH_COOKIE, refresh_token,
        max_age=int(issuer.refresh_expires.total_seconds()), **options
    )
    return response


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [full_name, username, email, password, avatar]
          properties:
            full_name: { type: string }
            username: { type: string }
            email: { type: string }
            password: { type: string }
            avatar: { type: string, description: hosted image URL }
            cover_image: { type: string, description: hosted image URL }
    responses:
      201:
        description: Created
      409:
        description: Username or email already taken
      422:
        description: Validation error
    """
    payload = json_payload()
    data = user_register_schema.load(payload)

    session = storage.get_session()
    existing = session.query(User).filter(
        (User.username == data["username"]) | (User.email == data["email"])
    ).first()
    if existing:
        raise ConflictError("User with email or username already exists")

    user = User(
        username=data["username"],
        email=data["email"],
        full_name=data["full_name"],
        avatar=data["avatar"],
        cover_image=data.get("cover_image", ""),
        password_hash=hash_password(data["password"]),
    )
    storage.new(user)
    storage.save()

    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "User registered successfully",
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login with username or email: returns access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [password]
           properties:
             username: { type: string }
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens, also set as httponly cookies)
      401:
        description: Wrong password
      404:
        description: User does not exist
      422:
        description: Validation error
    """
    payload = json_payload()
    data = user_login_schema.load(payload)

    tokens = _sessions().login(
        data["password"], username=data.get("username"), email=data.get("email")
    )

    response = jsonify(
        {
            "data": {
                "user": user_out_schema.dump(tokens.user),
                "access_token": tokens.access_token,
                "refresh_token": tokens.refresh_token,
            },
            "message": "User logged in successfully",
        }
    )
    return _set_token_cookies(response, tokens.access_token, tokens.refresh_token), 200


@bp.post("/refresh")
def refresh():
    """
    Use a refresh token to obtain new access and refresh tokens (rotation).
    The token is read from the JSON body, falling back to the refreshToken cookie.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (new pair, also set as httponly cookies)
      401:
        description: Missing, invalid, expired or already used refresh token
    """
    payload = json_payload()
    presented = payload.get("refresh_token") or request.cookies.get(REFRESH_COOKIE)

    tokens = _sessions().refresh(presented)

    response = jsonify(
        {
            "data": {
                "access_token": tokens.access_token,
                "refresh_token": tokens.refresh_token,
            },
            "message": "Access token refreshed",
        }
    )
    return _set_token_cookies(response, tokens.access_token, tokens.refresh_token), 200


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: invalidates the current refresh token and clears the token cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out (also when already logged out)
      401:
        description: Unauthorized
    """
    _sessions().logout(g.current_user.id)

    response = jsonify({"data": {}, "message": "User logged out"})
    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response, 200
