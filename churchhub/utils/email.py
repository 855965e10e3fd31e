from flask import current_app
from flask_mail import Message, Mail
from threading import Thread
from datetime import datetime

mail = Mail()


def send_async_email(app, msg):
    with app.app_context():
        try:
            mail.send(msg)
        except Exception as e:
            app.logger.error(f"Failed to send email: {e}")


def send_verification_email(user, token):
    app = current_app._get_current_object()
    verify_url = f"{app.config.get('CLIENT_URL')}/verify-email/{token}"

    # If in testing mode, log the email instead of sending it
    if app.testing:
        app.logger.info("--- MOCK EMAIL ---")
        app.logger.info(f"To: {user.email}")
        app.logger.info("Subject: Confirm your email")
        app.logger.info(f"Body: Confirm your account by visiting:\n{verify_url}")
        app.logger.info("--- END MOCK EMAIL ---")
        return

    current_year = datetime.utcnow().year
    msg = Message(
        "Confirm your email",
        sender=("ChurchHub", app.config.get("MAIL_USERNAME")),
        recipients=[user.email],
    )

    name = user.profile.full_name if user.profile and user.profile.full_name else "friend"
    msg.body = f"""
Welcome, {name}!

Please confirm your email address to finish creating your account:

{verify_url}

Once confirmed, sign in to see the status of your role request. A church
administrator reviews every request before access is granted.

(c) {current_year} ChurchHub
"""

    Thread(target=send_async_email, args=(app, msg)).start()


def send_role_decision_email(user, assignment):
    """Tell a member their role request was approved or declined."""
    app = current_app._get_current_object()
    role = assignment.role.label
    decision = assignment.status.value
    church = assignment.church.name if assignment.church else "your church"

    if app.testing:
        app.logger.info("--- MOCK ROLE DECISION EMAIL ---")
        app.logger.info(f"To: {user.email}")
        app.logger.info(f"Body: Your {role} request at {church} was {decision}.")
        app.logger.info("--- END MOCK ROLE DECISION EMAIL ---")
        return

    msg = Message(
        f"Your {role} request was {decision}",
        sender=("ChurchHub", app.config.get("MAIL_USERNAME")),
        recipients=[user.email],
    )
    msg.body = f"""
Your request for the {role} role at {church} was {decision}.

Sign in at {app.config.get('CLIENT_URL')}/dashboard to continue.
"""

    Thread(target=send_async_email, args=(app, msg)).start()
