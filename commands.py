# commands.py
"""
运维命令（替代旧的 init_db.py / create_admin.py 脚本）：
    flask --app app:create_app init-db
    flask --app app:create_app create-admin --email admin@example.com
"""
import click

from extensions import db
from models.user import User


def register_commands(app):
    @app.cli.command("init-db")
    @click.option("--drop/--no-drop", default=False, help="先删除所有表")
    def init_db(drop):
        if drop:
            click.echo("Dropping all tables...")
            db.drop_all()
        click.echo("Creating all tables...")
        db.create_all()
        click.echo("Done.")

    @app.cli.command("create-admin")
    @click.option("--email", required=True)
    @click.option("--name", default="Admin")
    def create_admin(email, name):
        u = User.query.filter_by(email=email).first()
        if u and u.role == "Admin":
            click.echo(f"用户已是管理员：{email}")
            return
        if not u:
            u = User(email=email, name=name)
            db.session.add(u)
        u.role = "Admin"
        db.session.commit()
        click.echo(f"✅ 管理员已就绪：{email}")
