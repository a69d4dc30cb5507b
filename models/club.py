# models/club.py
from datetime import datetime

from extensions import db

# 前端字段名（camelCase） -> 模型列名
WIRE_FIELDS = {
    "scholarshipName": "club_name",
    "clubName": "club_name",
    "universityName": "university_name",
    "universityCountry": "university_country",
    "universityCity": "university_city",
    "universityImage": "university_image",
    "universityWorldRank": "university_world_rank",
    "scholarshipCategory": "category",
    "category": "category",
    "subjectCategory": "subject_category",
    "degree": "degree",
    "tuitionFees": "tuition_fees",
    "applicationFees": "application_fees",
    "serviceCharge": "service_charge",
    "deadline": "deadline",
    "postedDate": "posted_date",
    "postedUserEmail": "posted_user_email",
    "description": "description",
}

NUMERIC_COLUMNS = {"application_fees", "tuition_fees", "service_charge"}
DATE_COLUMNS = {"posted_date"}


class Club(db.Model):
    __tablename__ = "clubs"
    id = db.Column(db.Integer, primary_key=True)
    club_name = db.Column(db.String(200))

    university_name = db.Column(db.String(200), index=True)
    university_country = db.Column(db.String(80))
    university_city = db.Column(db.String(80))
    university_image = db.Column(db.String(500))
    university_world_rank = db.Column(db.String(20))

    category = db.Column(db.String(80), index=True)
    subject_category = db.Column(db.String(80), index=True)
    degree = db.Column(db.String(80))

    tuition_fees = db.Column(db.Float)
    application_fees = db.Column(db.Float)
    service_charge = db.Column(db.Float)

    deadline = db.Column(db.String(40))
    posted_date = db.Column(db.DateTime, default=datetime.utcnow)
    posted_user_email = db.Column(db.String(120), nullable=False, index=True)
    description = db.Column(db.Text)

    def to_dict(self):
        return {
            "_id": self.id,
            "scholarshipName": self.club_name,
            "universityName": self.university_name,
            "universityCountry": self.university_country,
            "universityCity": self.university_city,
            "universityImage": self.university_image,
            "universityWorldRank": self.university_world_rank,
            "scholarshipCategory": self.category,
            "subjectCategory": self.subject_category,
            "degree": self.degree,
            "tuitionFees": self.tuition_fees,
            "applicationFees": self.application_fees,
            "serviceCharge": self.service_charge,
            "deadline": self.deadline,
            "postedDate": self.posted_date.isoformat() if self.posted_date else None,
            "postedUserEmail": self.posted_user_email,
            "description": self.description,
        }
