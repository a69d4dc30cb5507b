# routes/applications.py
import logging
from datetime import datetime

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models.application import Application, STATUSES
from routes.auth import verify_moderator
from routes.common import parse_id, parse_datetime, to_float

applications_bp = Blueprint("applications", __name__)
logger = logging.getLogger(__name__)

REQUIRED = ("scholar", "scholarshipId", "scholarshipName", "universityName", "fees", "applicant", "userName")

# PUT /applications/<id> 允许整体更新的字段
UPDATABLE = {
    "scholarshipName": "scholarship_name",
    "universityName": "university_name",
    "fees": "fees",
    "userName": "user_name",
    "appliedDate": "applied_date",
    "payment": "payment",
    "status": "status",
    "feedback": "feedback",
}


def _owner_email_of(scholar):
    if isinstance(scholar, dict):
        return scholar.get("postedUserEmail")
    return None


def _get_app(raw_id):
    aid = parse_id(raw_id)
    return db.session.get(Application, aid) if aid else None


@applications_bp.post("/applications")
@jwt_required()
def create_application():
    data = request.get_json(silent=True) or {}
    if any(not data.get(k) for k in REQUIRED):
        return jsonify({"message": "Missing fields"}), 400

    scholar = data["scholar"]
    app_obj = Application(
        scholar=scholar,
        club_owner_email=_owner_email_of(scholar),
        scholarship_id=str(data["scholarshipId"]),
        scholarship_name=data["scholarshipName"],
        university_name=data["universityName"],
        fees=to_float(data["fees"]),
        applicant=data["applicant"],
        user_name=data["userName"],
        applied_date=parse_datetime(data.get("appliedDate")) or datetime.utcnow(),
        status=data.get("status") or "pending",
        payment=data.get("payment"),
    )
    try:
        db.session.add(app_obj)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("save application failed")
        return jsonify({"message": "Server error while saving application"}), 500

    logger.info(f"新申请: {app_obj.id} {app_obj.applicant} -> {app_obj.scholarship_name}")
    return jsonify({
        "success": True,
        "message": "Application submitted successfully",
        "insertedId": app_obj.id,
    })


@applications_bp.get("/applications/user")
@jwt_required()
def list_user_applications():
    email = request.args.get("email")
    if not email:
        return jsonify({"message": "Email query required"}), 400

    try:
        rows = Application.query.filter_by(applicant=email).all()
    except SQLAlchemyError:
        logger.exception("load applications failed")
        return jsonify({"message": "Server error loading applications"}), 500
    return jsonify([r.to_dict() for r in rows])


@applications_bp.get("/applications/<string:email>")
@verify_moderator
def list_owner_applications(email):
    """版主查看投递到自己发布的俱乐部的申请"""
    try:
        rows = Application.query.filter_by(club_owner_email=email).all()
    except SQLAlchemyError:
        logger.exception("fetch applications failed")
        return jsonify({"message": "Server error fetching applications"}), 500
    return jsonify([r.to_dict() for r in rows])


@applications_bp.get("/applications/details/<string:app_id>")
@jwt_required()
def application_detail(app_id):
    if not parse_id(app_id):
        return jsonify({"message": "Invalid application ID"}), 400
    app_obj = _get_app(app_id)
    if not app_obj:
        return jsonify({"message": "Application not found"}), 404
    return jsonify(app_obj.to_dict())


@applications_bp.put("/applications/<string:app_id>")
@jwt_required()
def update_application(app_id):
    if not parse_id(app_id):
        return jsonify({"message": "Invalid application ID"}), 400
    app_obj = _get_app(app_id)
    if not app_obj:
        return jsonify({"message": "Application not found"}), 404

    data = request.get_json(silent=True) or {}
    if "status" in data and data["status"] not in STATUSES:
        return jsonify({"message": "Invalid status value"}), 400

    try:
        for key, col in UPDATABLE.items():
            if key not in data:
                continue
            val = data[key]
            if col == "fees":
                val = to_float(val)
            elif col == "applied_date":
                val = parse_datetime(val) or app_obj.applied_date
            setattr(app_obj, col, val)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("update application failed")
        return jsonify({"message": "Server error updating application"}), 500

    return jsonify({"success": True, "message": "Application updated successfully"})


@applications_bp.put("/applications/<string:app_id>/status")
@verify_moderator
def update_status(app_id):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if status not in STATUSES:
        return jsonify({"message": "Invalid status value"}), 400

    app_obj = _get_app(app_id)
    if not app_obj:
        return jsonify({"message": "Application not found"}), 404

    try:
        app_obj.status = status
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("update status failed")
        return jsonify({"message": "Server error updating status"}), 500
    return jsonify({"success": True, "message": "Status updated successfully"})


@applications_bp.put("/applications/<string:app_id>/feedback")
@verify_moderator
def update_feedback(app_id):
    data = request.get_json(silent=True) or {}
    app_obj = _get_app(app_id)
    if not app_obj:
        return jsonify({"message": "Application not found"}), 404

    try:
        app_obj.feedback = data.get("feedback")
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("save feedback failed")
        return jsonify({"message": "Server error saving feedback"}), 500
    return jsonify({"success": True, "message": "Feedback saved successfully"})


@applications_bp.delete("/applications/<string:app_id>")
@jwt_required()
def cancel_application(app_id):
    """申请人撤回：只有 pending 状态可以删"""
    app_obj = _get_app(app_id)
    if not app_obj:
        return jsonify({"message": "Application not found"}), 404
    if app_obj.status != "pending":
        return jsonify({"message": "Only pending applications can be deleted"}), 403

    try:
        db.session.delete(app_obj)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("delete application failed")
        return jsonify({"message": "Server error deleting application"}), 500
    return jsonify({"success": True, "deleted": 1})


@applications_bp.delete("/applications/delete/<string:app_id>")
@verify_moderator
def reject_application(app_id):
    app_obj = _get_app(app_id)
    deleted = 0
    try:
        if app_obj:
            db.session.delete(app_obj)
            db.session.commit()
            deleted = 1
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("reject application failed")
        return jsonify({"message": "Server error deleting application"}), 500
    return jsonify({"success": True, "deleted": deleted, "status": 200})
