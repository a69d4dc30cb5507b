# models/application.py
from datetime import datetime

from extensions import db

STATUSES = [
    "pending",      # 待审核
    "processing",   # 处理中
    "completed",    # 已完成
    "rejected",     # 已拒绝
]


class Application(db.Model):
    __tablename__ = "applications"
    id = db.Column(db.Integer, primary_key=True)

    # 申请时俱乐部的快照（前端直接回传的 scholar 对象）
    scholar = db.Column(db.JSON, nullable=False)
    # 从 scholar.postedUserEmail 冗余出来，版主按它查申请
    club_owner_email = db.Column(db.String(120), index=True)

    scholarship_id = db.Column(db.String(64), nullable=False, index=True)
    scholarship_name = db.Column(db.String(200), nullable=False)
    university_name = db.Column(db.String(200), nullable=False, index=True)
    fees = db.Column(db.Float)

    applicant = db.Column(db.String(120), nullable=False, index=True)  # 申请人 email
    user_name = db.Column(db.String(120), nullable=False)
    applied_date = db.Column(db.DateTime, default=datetime.utcnow)

    status = db.Column(db.String(20), default="pending", nullable=False, index=True)
    payment = db.Column(db.String(20), default="unpaid")
    feedback = db.Column(db.Text)

    def to_dict(self):
        return {
            "_id": self.id,
            "scholar": self.scholar,
            "scholarshipId": self.scholarship_id,
            "scholarshipName": self.scholarship_name,
            "universityName": self.university_name,
            "fees": self.fees,
            "applicant": self.applicant,
            "userName": self.user_name,
            "appliedDate": self.applied_date.isoformat() if self.applied_date else None,
            "status": self.status,
            "payment": self.payment,
            "feedback": self.feedback,
        }
