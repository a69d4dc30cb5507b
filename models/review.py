from datetime import datetime

from extensions import db


class Review(db.Model):
    __tablename__ = "reviews"
    id = db.Column(db.Integer, primary_key=True)
    scholarship_id = db.Column(db.String(64), nullable=False, index=True)
    university_name = db.Column(db.String(200))
    scholarship_name = db.Column(db.String(200))
    user_name = db.Column(db.String(120), nullable=False)
    user_email = db.Column(db.String(120), nullable=False, index=True)
    post_by_email = db.Column(db.String(120), nullable=False, index=True)  # 俱乐部发布者
    user_image = db.Column(db.String(500))
    rating_point = db.Column(db.Float, nullable=False)
    review_comment = db.Column(db.Text, nullable=False)
    review_date = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "_id": self.id,
            "scholarshipId": self.scholarship_id,
            "universityName": self.university_name,
            "scholarshipName": self.scholarship_name,
            "userName": self.user_name,
            "userEmail": self.user_email,
            "postByEmail": self.post_by_email,
            "userImage": self.user_image,
            "ratingPoint": self.rating_point,
            "reviewComment": self.review_comment,
            "reviewDate": self.review_date.isoformat() if self.review_date else None,
        }
