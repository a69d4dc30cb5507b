# config.py
import os
from datetime import timedelta

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
INSTANCE_DIR = os.path.join(BASE_DIR, "instance")

DB_PATH = os.path.join(INSTANCE_DIR, "clubhub.sqlite3")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    # 注意：绝对路径 + 3 个斜杠
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        f"sqlite:///{DB_PATH.replace(os.sep, '/')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # ---- 登录态：token 放在 HttpOnly cookie 里 ----
    JWT_SECRET_KEY = os.getenv("ACCESS_TOKEN_SECRET", "dev-jwt")
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ACCESS_COOKIE_NAME = "token"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    JWT_COOKIE_SECURE = os.getenv("FLASK_ENV", os.getenv("NODE_ENV")) == "production"
    JWT_COOKIE_SAMESITE = "None"
    JWT_COOKIE_CSRF_PROTECT = False
    # cookie 跟随 token 过期（1 小时），不做会话 cookie
    JWT_SESSION_COOKIE = False

    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()
    ]
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # ---- 微信支付（Native 下单） ----
    WX_MCHID = os.getenv("WX_MCHID")
    WX_APPID = os.getenv("WX_APPID")
    WX_APIV3_KEY = os.getenv("WX_APIV3_KEY")
    WX_CERT_SERIAL_NO = os.getenv("WX_CERT_SERIAL_NO")
    WX_PRIVATE_KEY_PATH = os.getenv("WX_PRIVATE_KEY_PATH", "./cert/apiclient_key.pem")
    WX_CERT_DIR = os.getenv("WX_CERT_DIR", "./cert")
    WX_NOTIFY_URL = os.getenv("WX_NOTIFY_URL")
    PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "CNY")
