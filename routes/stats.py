# routes/stats.py
import logging

from flask import Blueprint, jsonify
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models.user import User
from models.club import Club
from models.application import Application
from models.payment import Payment
from routes.auth import verify_admin

stats_bp = Blueprint("stats", __name__)
logger = logging.getLogger(__name__)


@stats_bp.get("/home/stats")
def home_stats():
    try:
        return jsonify({
            "users": User.query.count(),
            "applications": Application.query.count(),
            "clubs": Club.query.count(),
        })
    except SQLAlchemyError:
        logger.exception("home stats failed")
        return jsonify({"users": 0, "applications": 0, "clubs": 0}), 500


@stats_bp.get("/analytics/stats")
@verify_admin
def analytics_stats():
    try:
        users_count = User.query.count()
        clubs_count = Club.query.count()
        # 只统计已支付的流水
        total_fees = db.session.query(func.coalesce(func.sum(Payment.amount), 0))\
            .filter(Payment.status == "PAID").scalar()
        rows = db.session.query(Application.university_name, func.count(Application.id))\
            .group_by(Application.university_name).all()
    except SQLAlchemyError:
        logger.exception("analytics stats failed")
        return jsonify({
            "usersCount": 0,
            "clubsCount": 0,
            "totalFees": 0,
            "appCountPerUniversity": {},
        }), 500

    return jsonify({
        "usersCount": users_count,
        "clubsCount": clubs_count,
        "totalFees": float(total_fees or 0),
        "appCountPerUniversity": {(u or "Unknown"): int(n) for u, n in rows},
    })
