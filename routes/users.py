# routes/users.py
import logging

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from models.user import User
from routes.auth import verify_admin
from routes.common import parse_id

users_bp = Blueprint("users", __name__)
logger = logging.getLogger(__name__)

# 角色修改只允许这两个值，Admin 只能通过 flask create-admin 创建
ASSIGNABLE_ROLES = ["Student", "Moderator"]


@users_bp.get("/users")
@verify_admin
def list_users():
    users = User.query.order_by(User.id.asc()).all()
    return jsonify([u.to_dict() for u in users])


@users_bp.get("/users/<string:email>")
@jwt_required()
def get_user(email):
    user = User.query.filter_by(email=email).first()
    return jsonify(user.to_dict() if user else None)


@users_bp.post("/users")
def create_user():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    if not email:
        return jsonify({"message": "Email is required"}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({"message": "User already exists"}), 409

    user = User(
        name=data.get("name"),
        email=email,
        photo_url=data.get("photoURL") or data.get("photoUrl"),
        role="Student",
    )
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"message": "User already exists"}), 409

    logger.info(f"新用户注册: {email}")
    return jsonify({"acknowledged": True, "insertedId": user.id})


@users_bp.put("/users/<string:user_id>/role")
@verify_admin
def update_role(user_id):
    data = request.get_json(silent=True) or {}
    role = data.get("role")
    if role not in ASSIGNABLE_ROLES:
        return jsonify({"message": "Invalid role value"}), 400

    uid = parse_id(user_id)
    user = db.session.get(User, uid) if uid else None
    if not user:
        return jsonify({"message": "User not found"}), 404

    try:
        user.role = role
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("update role failed")
        return jsonify({"message": "Server error"}), 500
    return jsonify({"success": True, "message": "Role updated successfully"})


@users_bp.put("/users/assign/<string:email>")
@verify_admin
def assign_moderator(email):
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(email=email).first()
    if not user:
        return jsonify({"message": "User not found"}), 404

    try:
        user.moderator_for = data.get("moderatorFor")
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("assign moderator failed")
        return jsonify({"message": "Server error"}), 500
    return jsonify({"success": True, "message": "Moderator assigned successfully"})


@users_bp.delete("/users/<string:user_id>")
@verify_admin
def delete_user(user_id):
    uid = parse_id(user_id)
    if not uid:
        return jsonify({"message": "Invalid user ID"}), 400

    user = db.session.get(User, uid)
    if not user:
        return jsonify({"message": "User not found"}), 404

    try:
        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("delete user failed")
        return jsonify({"message": "Server error deleting user"}), 500
    return jsonify({"success": True, "deleted": 1})
