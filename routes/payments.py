# routes/payments.py
import logging
from datetime import datetime

from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models.application import Application
from models.payment import Payment
from routes.auth import current_email
from routes.common import parse_id, to_float
from services.payment_gateway import (
    PaymentGatewayError,
    PaymentGatewayNotConfigured,
    create_payment_intent,
    query_paid,
)

payments_bp = Blueprint("payments", __name__)
logger = logging.getLogger(__name__)


def _mark_paid(payment: Payment, transaction_id=None):
    payment.status = "PAID"
    payment.paid_at = payment.paid_at or datetime.utcnow()
    if transaction_id:
        payment.transaction_id = transaction_id
    if payment.application_id:
        app_obj = db.session.get(Application, payment.application_id)
        if app_obj:
            app_obj.payment = "paid"


# ==================== 1. 下单 ====================
@payments_bp.post("/create-payment-intent")
@jwt_required()
def create_intent():
    data = request.get_json(silent=True) or {}
    amount = to_float(data.get("amount", data.get("fees")), 0)
    if amount <= 0:
        return jsonify({"message": "Invalid amount"}), 400

    name = data.get("description") or data.get("scholarshipName") or "Club application fee"
    desc = f"ClubHub-{name}"

    try:
        intent = create_payment_intent(amount, desc)
    except PaymentGatewayNotConfigured:
        return jsonify({"message": "Payment gateway not configured"}), 500
    except PaymentGatewayError:
        return jsonify({"message": "Payment gateway error"}), 502

    # 🔥 下单成功后落库一条 PENDING
    payment = Payment(
        out_trade_no=intent["order_no"],
        email=data.get("email") or current_email(),
        amount=amount,
        currency=current_app.config.get("PAYMENT_CURRENCY", "CNY"),
        description=desc,
        application_id=parse_id(data.get("applicationId")) if data.get("applicationId") else None,
        club_id=parse_id(data.get("clubId")) if data.get("clubId") else None,
        status="PENDING",
    )
    try:
        db.session.add(payment)
        db.session.commit()
        logger.info(f"✅ 支付单已入库: {payment.out_trade_no}")
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("save pending payment failed")
        return jsonify({"message": "Server error"}), 500

    return jsonify({"orderNo": intent["order_no"], "codeUrl": intent["code_url"]})


# ==================== 2. 记录已完成的支付 ====================
@payments_bp.post("/payments")
@jwt_required()
def record_payment():
    data = request.get_json(silent=True) or {}
    order_no = data.get("orderNo")

    payment = Payment.query.filter_by(out_trade_no=order_no).first() if order_no else None
    if payment is None:
        amount = to_float(data.get("amount"))
        email = data.get("email") or current_email()
        if amount is None or not email:
            return jsonify({"message": "Missing payment fields"}), 400
        payment = Payment(
            out_trade_no=order_no,
            email=email,
            amount=amount,
            currency=data.get("currency") or current_app.config.get("PAYMENT_CURRENCY", "CNY"),
            application_id=parse_id(data.get("applicationId")) if data.get("applicationId") else None,
            club_id=parse_id(data.get("clubId")) if data.get("clubId") else None,
        )
        db.session.add(payment)
    else:
        # 网关下的单必须先在微信侧查到已支付，不能靠前端一句话改成 PAID
        if payment.status != "PAID" and not query_paid(payment.out_trade_no):
            logger.warning(f"⚠️ 订单 {payment.out_trade_no} 未在网关确认支付，拒绝记账")
            return jsonify({"message": "Payment not confirmed"}), 402
        if data.get("applicationId") and not payment.application_id:
            payment.application_id = parse_id(data.get("applicationId"))

    try:
        _mark_paid(payment, data.get("transactionId"))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("record payment failed")
        return jsonify({"message": "Server error saving payment"}), 500

    logger.info(f"✅ 支付完成: {payment.out_trade_no or payment.id} {payment.email} {payment.amount}")
    return jsonify({"success": True, "insertedId": payment.id, "payment": payment.to_dict()})


@payments_bp.get("/payments")
@jwt_required()
def list_payments():
    q = Payment.query
    email = request.args.get("email")
    if email:
        q = q.filter_by(email=email)
    rows = q.order_by(Payment.created_at.desc()).all()
    return jsonify([p.to_dict() for p in rows])


# ==================== 3. 查单 ====================
@payments_bp.get("/payments/status")
@jwt_required()
def payment_status():
    """前端轮询：本地已支付直接返回，否则去网关查一次"""
    order_no = request.args.get("orderNo")
    if not order_no:
        return jsonify({"paid": False})

    payment = Payment.query.filter_by(out_trade_no=order_no).first()
    if payment and payment.status == "PAID":
        return jsonify({"paid": True, "status": "SUCCESS"})

    if not query_paid(order_no):
        return jsonify({"paid": False})

    if payment:
        try:
            _mark_paid(payment)
            db.session.commit()
            logger.info(f"✅ [查单] 订单 {order_no} 已支付，更新状态")
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("update payment status failed")
            return jsonify({"message": "Server error"}), 500
    return jsonify({"paid": True, "status": "SUCCESS"})
