from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.video import Video
from models.schemas.video import VideoCreateSchema, VideoOutSchema
from .payload import json_payload
from utils.decorators import jwt_required

MAX_LIMIT = 100

bp = Blueprint("videos", __name__)

video_create_schema = VideoCreateSchema()
video_out_schema = VideoOutSchema()
video_list_out_schema = VideoOutSchema(many=True)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


@bp.post("/videos")
@jwt_required()
def create_video():
    """
    Register a video already stored on the media host, owned by the current user.
    ---
    tags:
      - Videos
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [title, description, video_file, thumbnail, duration]
           properties:
             title: { type: string }
             description: { type: string }
             video_file: { type: string }
             thumbnail: { type: string }
             duration: { type: number }
             is_published: { type: boolean }
    responses:
      201: { description: Created }
      401: { description: Unauthorized }
      422: { description: Validation error }
    """
    payload = json_payload()
    data = video_create_schema.load(payload)

    video = Video(owner_id=g.current_user.id, **data)
    storage.new(video)
    storage.save()
    return jsonify(
        {
            "data": video_out_schema.dump(video),
            "message": "Video uploaded successfully",
        }
    ), 201


@bp.get("/videos")
@jwt_required()
def list_videos():
    """
    List the current user's videos, newest first.
    ---
    tags:
      - Videos
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
      - in: query
        name: limit
        type: integer
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    session = storage.get_session()
    page, limit = parse_pagination()

    query = session.query(Video).filter(Video.owner_id == g.current_user.id)
    total = query.count()
    rows = (
        query.order_by(Video.created_at.desc(), Video.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        {
            "data": video_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    ), 200
