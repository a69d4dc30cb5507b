# models/payment.py
from datetime import datetime

from extensions import db


class Payment(db.Model):
    """
    支付记录：
    - 下单（create-payment-intent）时先写一条 PENDING
    - 前端确认 / 查单成功后置为 PAID
    """
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    # 商户订单号（发给支付平台的唯一单号）
    out_trade_no = db.Column(db.String(64), unique=True, nullable=True, index=True)
    # 支付平台返回的流水号
    transaction_id = db.Column(db.String(64), nullable=True)

    email = db.Column(db.String(120), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False, default=0)
    currency = db.Column(db.String(8), default="CNY")
    description = db.Column(db.String(255))

    application_id = db.Column(db.Integer, db.ForeignKey("applications.id", ondelete="SET NULL"), nullable=True, index=True)
    club_id = db.Column(db.Integer, db.ForeignKey("clubs.id", ondelete="SET NULL"), nullable=True)

    status = db.Column(db.String(20), default="PENDING", index=True)  # PENDING | PAID
    paid_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "_id": self.id,
            "orderNo": self.out_trade_no,
            "transactionId": self.transaction_id,
            "email": self.email,
            "amount": self.amount,
            "currency": self.currency,
            "description": self.description,
            "applicationId": self.application_id,
            "clubId": self.club_id,
            "status": self.status,
            "paidAt": self.paid_at.isoformat() if self.paid_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
