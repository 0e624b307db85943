from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort
from sqlalchemy import func

from models import storage
from models.user import User
from models.subscription import Subscription
from models.schemas.user import (
    AccountUpdateSchema,
    ChannelProfileSchema,
    ImageUpdateSchema,
    PasswordChangeSchema,
    UserOutSchema,
)
from .payload import json_payload
from utils.decorators import jwt_required
from utils.exceptions import ConflictError, NotFoundError, UnauthorizedError
from utils.security import hash_password, verify_password

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()
account_update_schema = AccountUpdateSchema()
password_change_schema = PasswordChangeSchema()
image_update_schema = ImageUpdateSchema()
channel_profile_schema = ChannelProfileSchema()


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify(
        {
            "data": user_out_schema.dump(g.current_user),
            "message": "Current user fetched successfully",
        }
    ), 200


@bp.patch("/me")
@jwt_required()
def update_account():
    """
    Update full name and email of the current user.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [full_name, email]
           properties:
             full_name: { type: string }
             email: { type: string }
    responses:
      200: { description: OK }
      400: { description: Missing fields }
      409: { description: Email already taken }
    """
    payload = json_payload()
    if not payload.get("full_name") or not payload.get("email"):
        abort(400, description="full_name and email are required")
    data = account_update_schema.load(payload)

    user = g.current_user
    session = storage.get_session()
    taken = session.query(User).filter(User.email == data["email"], User.id != user.id).first()
    if taken:
        raise ConflictError("Email already registered")

    user.full_name = data["full_name"]
    user.email = data["email"]
    user.save()
    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "Account details updated successfully",
        }
    ), 200


@bp.post("/me/password")
@jwt_required()
def change_password():
    """
    Change the current user's password.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [old_password, new_password]
           properties:
             old_password: { type: string }
             new_password: { type: string }
    responses:
      200: { description: OK }
      401: { description: Old password is wrong }
      422: { description: Validation error }
    """
    payload = json_payload()
    data = password_change_schema.load(payload)

    user = g.current_user
    if not verify_password(data["old_password"], user.password_hash):
        raise UnauthorizedError("Invalid old password", reason="password")

    user.password_hash = hash_password(data["new_password"])
    user.save()
    return jsonify({"data": {}, "message": "Password changed successfully"}), 200


def _update_image(attr: str, label: str):
    payload = json_payload()
    data = image_update_schema.load(payload)

    user = g.current_user
    setattr(user, attr, data["url"])
    user.save()
    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": f"{label} updated successfully",
        }
    ), 200


@bp.patch("/me/avatar")
@jwt_required()
def update_avatar():
    """
    Point the avatar at a newly hosted image.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [url]
           properties:
             url: { type: string }
    responses:
      200: { description: OK }
    """
    return _update_image("avatar", "Avatar")


@bp.patch("/me/cover-image")
@jwt_required()
def update_cover_image():
    """
    Point the cover image at a newly hosted image.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [url]
           properties:
             url: { type: string }
    responses:
      200: { description: OK }
    """
    return _update_image("cover_image", "Cover image")


@bp.get("/channels/<username>")
@jwt_required(optional=True)
def channel_profile(username: str):
    """
    Public channel profile with subscription counts.
    ---
    tags:
      - Users
    parameters:
      -  in: path
         name: username
         type: string
         required: true
    responses:
      200: { description: OK }
      400: { description: Username is missing }
      404: { description: Channel does not exist }
    """
    username = (username or "").strip().lower()
    if not username:
        abort(400, description="Username is missing")

    session = storage.get_session()
    channel = session.query(User).filter(User.username == username).first()
    if not channel:
        raise NotFoundError("Channel does not exist")

    subscribers_count = session.query(func.count(Subscription.id)).filter(
        Subscription.channel_id == channel.id
    ).scalar()
    subscribed_to_count = session.query(func.count(Subscription.id)).filter(
        Subscription.subscriber_id == channel.id
    ).scalar()

    is_subscribed = False
    viewer = g.current_user
    if viewer is not None:
        is_subscribed = session.query(Subscription.id).filter(
            Subscription.channel_id == channel.id,
            Subscription.subscriber_id == viewer.id,
        ).first() is not None

    profile = {
        "id": channel.id,
        "username": channel.username,
        "email": channel.email,
        "full_name": channel.full_name,
        "avatar": channel.avatar,
        "cover_image": channel.cover_image,
        "subscribers_count": subscribers_count or 0,
        "channels_subscribed_to_count": subscribed_to_count or 0,
        "is_subscribed": is_subscribed,
    }
    return jsonify(
        {
            "data": channel_profile_schema.dump(profile),
            "message": "User channel fetched successfully",
        }
    ), 200


@bp.get("/search")
def search_user():
    """
    Find a user by exact username (case-insensitive).
    ---
    tags:
      - Users
    parameters:
      -  in: query
         name: username
         type: string
         required: true
    responses:
      200: { description: OK }
      400: { description: Username is required }
      404: { description: Username does not exist }
    """
    username = (request.args.get("username") or "").strip().lower()
    if not username:
        abort(400, description="Username is required")

    session = storage.get_session()
    user = session.query(User).filter(User.username == username).first()
    if not user:
        raise NotFoundError("Username does not exist")
    return jsonify({"data": user_out_schema.dump(user)}), 200
