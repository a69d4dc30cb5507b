from datetime import datetime

from extensions import db

ROLES = ("Student", "Moderator", "Admin")


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120))
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    photo_url = db.Column(db.String(500))
    role = db.Column(db.String(32), default="Student", nullable=False)
    # 版主负责的大学/俱乐部（前端自由结构）
    moderator_for = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def is_admin(self):
        return self.role == "Admin"

    @property
    def is_moderator(self):
        return self.role in ("Moderator", "Admin")

    def to_dict(self):
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "photoURL": self.photo_url,
            "role": self.role,
            "moderatorFor": self.moderator_for,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
