# routes/auth.py
from __future__ import annotations

import logging
from functools import wraps

from flask import Blueprint, request, jsonify
from flask_jwt_extended import (
    create_access_token,
    get_jwt_identity,
    set_access_cookies,
    unset_jwt_cookies,
    verify_jwt_in_request,
)
from sqlalchemy.exc import SQLAlchemyError

from models.user import User

auth_bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)

# 这些 claim 由 flask_jwt_extended 自己写入，不能被请求体覆盖
RESERVED_CLAIMS = {"email", "sub", "exp", "iat", "nbf", "jti", "type", "fresh", "csrf"}


def current_email() -> str | None:
    ident = get_jwt_identity()
    if ident is None:
        return None
    return str(ident)


@auth_bp.post("/jwt")
def issue_token():
    """
    登录后由前端调用，签发 token 并写入 HttpOnly cookie：
      入参：{"email": "...", ...}
    """
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    if not email:
        return jsonify({"message": "Email is required"}), 400

    # 其余简单字段原样放进 claims，方便前端回读
    claims = {
        k: v for k, v in data.items()
        if k not in RESERVED_CLAIMS and isinstance(v, (str, int, float, bool))
    }
    token = create_access_token(identity=email, additional_claims=claims)

    resp = jsonify({"success": True})
    set_access_cookies(resp, token)
    return resp


@auth_bp.post("/logout")
def logout():
    resp = jsonify({"success": True})
    unset_jwt_cookies(resp)
    return resp


def _role_gate(check, forbidden_msg):
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            email = current_email()
            if not email:
                return jsonify({"message": "Unauthorized"}), 401
            try:
                user = User.query.filter_by(email=email).first()
            except SQLAlchemyError:
                logger.exception("role check failed for %s", email)
                return jsonify({"message": "Server error"}), 500
            if not user or not check(user):
                return jsonify({"message": forbidden_msg}), 403
            return fn(*args, **kwargs)
        return wrapper
    return deco


# 使用：@verify_admin / @verify_moderator（管理员也算版主）；只要求登录的接口直接用 @jwt_required()
verify_admin = _role_gate(lambda u: u.is_admin, "Forbidden: Admin only")
verify_moderator = _role_gate(lambda u: u.is_moderator, "Forbidden: Moderator only")
