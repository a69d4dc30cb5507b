# services/payment_gateway.py
"""
支付网关（微信支付 Native 下单）。

路由层只调用：
- create_payment_intent(amount, description) -> {"order_no", "code_url"}
- query_paid(order_no) -> bool

未配置商户证书时 get_wxpay_client() 返回 None，调用方按“网关未配置”处理。
"""
import json
import logging
import os
import time
from uuid import uuid4

from flask import current_app
from wechatpayv3 import WeChatPay, WeChatPayType

logger = logging.getLogger(__name__)


class PaymentGatewayError(RuntimeError):
    """支付平台返回失败或调用异常。"""


class PaymentGatewayNotConfigured(PaymentGatewayError):
    pass


def get_wxpay_client():
    cfg = current_app.config
    private_key_path = cfg.get("WX_PRIVATE_KEY_PATH")
    if not private_key_path or not os.path.exists(private_key_path):
        logger.warning("微信支付私钥不存在，跳过初始化")
        return None
    try:
        with open(private_key_path, "r") as f:
            private_key = f.read()
        return WeChatPay(
            wechatpay_type=WeChatPayType.NATIVE,
            mchid=cfg.get("WX_MCHID"),
            private_key=private_key,
            cert_serial_no=cfg.get("WX_CERT_SERIAL_NO"),
            apiv3_key=cfg.get("WX_APIV3_KEY"),
            appid=cfg.get("WX_APPID"),
            notify_url=cfg.get("WX_NOTIFY_URL"),
            cert_dir=cfg.get("WX_CERT_DIR"),
            logger=logger,
        )
    except Exception as e:
        logger.error(f"微信支付初始化失败: {e}")
        return None


def new_order_no() -> str:
    return f"CLB{int(time.time() * 1000)}{uuid4().hex[:6].upper()}"


def _as_dict(result):
    if isinstance(result, str):
        try:
            return json.loads(result)
        except ValueError:
            return {"raw": result}
    return result or {}


def create_payment_intent(amount, description, order_no=None) -> dict:
    """
    amount 单位为元；微信按分下单。
    成功返回 {"order_no": ..., "code_url": ...}，失败抛 PaymentGatewayError。
    """
    wxpay = get_wxpay_client()
    if wxpay is None:
        raise PaymentGatewayNotConfigured("wechat pay is not configured")

    order_no = order_no or new_order_no()
    if len(description) > 100:
        description = description[:97] + "..."

    try:
        code, result = wxpay.pay(
            description=description,
            out_trade_no=order_no,
            amount={"total": int(round(float(amount) * 100))},
            pay_type=WeChatPayType.NATIVE,
        )
    except Exception as e:
        logger.error(f"微信下单异常: {e}")
        raise PaymentGatewayError(str(e)) from e

    result = _as_dict(result)
    if code in (200, 202) and result.get("code_url"):
        logger.info(f"✅ 微信下单成功: {order_no}")
        return {"order_no": order_no, "code_url": result["code_url"]}

    logger.error(f"微信下单失败: {code} {result}")
    raise PaymentGatewayError(f"gateway returned {code}")


def query_paid(order_no) -> bool:
    """去微信查单，trade_state == SUCCESS 视为已支付；网关不可用时返回 False。"""
    wxpay = get_wxpay_client()
    if wxpay is None:
        return False
    try:
        code, result = wxpay.query(out_trade_no=order_no)
    except Exception as e:
        logger.error(f"微信查单异常: {e}")
        return False
    result = _as_dict(result)
    return code == 200 and result.get("trade_state") == "SUCCESS"
