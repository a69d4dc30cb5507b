# routes/reviews.py
import logging
from datetime import datetime

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models.review import Review
from routes.common import parse_id, parse_datetime, to_float

reviews_bp = Blueprint("reviews", __name__)
logger = logging.getLogger(__name__)

REQUIRED = ("scholarshipId", "userName", "userEmail", "ratingPoint", "reviewComment", "postByEmail")


@reviews_bp.get("/reviews")
def list_reviews():
    """
    GET /reviews?scholarshipId=&email=&modMail=
    三个条件都可选，同时给出时为 AND
    """
    q = Review.query
    scholarship_id = request.args.get("scholarshipId")
    email = request.args.get("email")
    mod_mail = request.args.get("modMail")

    if scholarship_id:
        q = q.filter_by(scholarship_id=scholarship_id)
    if email:
        q = q.filter_by(user_email=email)
    if mod_mail:
        q = q.filter_by(post_by_email=mod_mail)

    try:
        rows = q.all()
    except SQLAlchemyError:
        logger.exception("list reviews failed")
        return jsonify({"message": "Server error"}), 500
    return jsonify([r.to_dict() for r in rows])


@reviews_bp.post("/reviews")
@jwt_required()
def create_review():
    data = request.get_json(silent=True) or {}
    if any(not data.get(k) for k in REQUIRED):
        return jsonify({"message": "Missing required review fields"}), 400

    rating = to_float(data.get("ratingPoint"))
    if rating is None:
        return jsonify({"message": "Missing required review fields"}), 400

    review = Review(
        scholarship_id=str(data["scholarshipId"]),
        university_name=data.get("universityName"),
        scholarship_name=data.get("scholarshipName"),
        user_name=data["userName"],
        user_email=data["userEmail"],
        post_by_email=data["postByEmail"],
        user_image=data.get("userImage"),
        rating_point=rating,
        review_comment=data["reviewComment"],
        review_date=parse_datetime(data.get("reviewDate")) or datetime.utcnow(),
    )
    try:
        db.session.add(review)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("save review failed")
        return jsonify({"message": "Server error while saving review"}), 500

    return jsonify({
        "success": True,
        "message": "Review added successfully",
        "insertedId": review.id,
    })


@reviews_bp.put("/reviews/<string:review_id>")
@jwt_required()
def update_review(review_id):
    rid = parse_id(review_id)
    if not rid:
        return jsonify({"message": "Invalid review ID"}), 400

    review = db.session.get(Review, rid)
    if not review:
        return jsonify({"message": "Review not found"}), 404

    data = request.get_json(silent=True) or {}
    try:
        if "reviewComment" in data:
            review.review_comment = data["reviewComment"]
        rating = to_float(data.get("ratingPoint"))
        if rating is not None:
            review.rating_point = rating
        review.review_date = datetime.utcnow()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("update review failed")
        return jsonify({"message": "Server error updating review"}), 500

    return jsonify({"success": True, "message": "Review updated successfully"})


@reviews_bp.delete("/reviews/<string:review_id>")
@jwt_required()
def delete_review(review_id):
    rid = parse_id(review_id)
    review = db.session.get(Review, rid) if rid else None
    if not review:
        return jsonify({"message": "Review not found"}), 404

    try:
        db.session.delete(review)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("delete review failed")
        return jsonify({"message": "Server error deleting review"}), 500
    return jsonify({"success": True})
