# routes/clubs.py
import logging

from flask import Blueprint, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models.club import Club, WIRE_FIELDS, NUMERIC_COLUMNS, DATE_COLUMNS
from routes.auth import verify_admin, current_email
from routes.common import parse_id, parse_datetime, to_float
from services.listing_query import (
    ListingQuery,
    ListingStoreError,
    SqlListingStore,
    search_listings,
)

clubs_bp = Blueprint("clubs", __name__)
logger = logging.getLogger(__name__)

REC_LIMIT = 4
HOME_LIMIT = 6


# ------- helpers -------

def _apply_fields(club: Club, data: dict) -> bool:
    """把前端字段写进模型，返回是否有字段真的发生变化。"""
    changed = False
    for key, col in WIRE_FIELDS.items():
        if key not in data:
            continue
        val = data[key]
        if col in NUMERIC_COLUMNS:
            val = to_float(val)
        elif col in DATE_COLUMNS:
            val = parse_datetime(val)
            if val is None:
                continue
        if getattr(club, col) != val:
            setattr(club, col, val)
            changed = True
    return changed


# ------- routes -------

@clubs_bp.get("/clubs")
def list_clubs():
    """
    搜索 + 分类 + 排序 + 分页：
      GET /clubs?search=&category=&sortBy=fees|date&order=asc|desc&page=1&limit=9
    """
    query = ListingQuery.from_args(request.args)
    try:
        page = search_listings(SqlListingStore(db.session), query)
    except ListingStoreError as e:
        logger.error(f"俱乐部列表查询失败: {e}")
        return jsonify({"message": "Server error"}), 500
    return jsonify(page.to_dict(lambda c: c.to_dict()))


@clubs_bp.get("/rec/clubs")
def recommended_clubs():
    category = request.args.get("category")
    current_id = request.args.get("currentId")
    if not category:
        return jsonify({"message": "Category is required for recommendations"}), 400

    try:
        q = Club.query.filter(Club.subject_category == category)
        cid = parse_id(current_id) if current_id else None
        if cid:
            q = q.filter(Club.id != cid)
        items = q.limit(REC_LIMIT).all()
    except SQLAlchemyError:
        logger.exception("Rec API Error")
        return jsonify({"message": "Failed to fetch recommendations"}), 500
    return jsonify([c.to_dict() for c in items])


@clubs_bp.get("/home/clubs")
def home_clubs():
    items = Club.query.limit(HOME_LIMIT).all()
    return jsonify([c.to_dict() for c in items])


@clubs_bp.get("/clubs/<string:admin_email>")
def clubs_by_owner(admin_email):
    items = Club.query.filter_by(posted_user_email=admin_email).all()
    return jsonify([c.to_dict() for c in items])


@clubs_bp.post("/clubs")
@verify_admin
def create_club():
    data = request.get_json(silent=True) or {}
    club = Club()
    _apply_fields(club, data)
    # 没传发布人就记在当前管理员名下
    if not club.posted_user_email:
        club.posted_user_email = current_email()

    try:
        db.session.add(club)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("create club failed")
        return jsonify({"message": "Server error"}), 500

    logger.info(f"✅ 俱乐部已创建: {club.id} by {club.posted_user_email}")
    return jsonify({"acknowledged": True, "insertedId": club.id})


@clubs_bp.delete("/clubs/delete/<string:club_id>")
@verify_admin
def delete_club(club_id):
    cid = parse_id(club_id)
    club = db.session.get(Club, cid) if cid else None
    if not club:
        return jsonify({"message": "Scholarship not found"}), 404

    try:
        db.session.delete(club)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("delete club failed")
        return jsonify({"success": False, "message": "Server error"}), 500
    return jsonify({"success": True, "deletedCount": 1})


@clubs_bp.get("/scholarship/data/<string:club_id>")
def club_detail(club_id):
    cid = parse_id(club_id)
    club = db.session.get(Club, cid) if cid else None
    if not club:
        return jsonify({"message": "No scholarship found"}), 404
    return jsonify(club.to_dict())


@clubs_bp.put("/scholarship/update/<string:club_id>")
@verify_admin
def update_club(club_id):
    cid = parse_id(club_id)
    club = db.session.get(Club, cid) if cid else None
    data = request.get_json(silent=True) or {}

    # 找不到和没有改动一样处理
    if not club or not _apply_fields(club, data):
        db.session.rollback()
        return jsonify({"message": "No changes made"}), 400

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("update club failed")
        return jsonify({"message": "Server error"}), 500
    return jsonify({"success": True, "message": "Updated successfully"})
