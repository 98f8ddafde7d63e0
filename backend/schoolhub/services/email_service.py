"""
Envío de correos (alta de usuario y notas).

Los envíos salen en un hilo daemon que corre FastMail con su propio event
loop; un fallo de SMTP se registra en el log y nunca llega al que pidió el
envío.
"""
import asyncio
import logging
import threading

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

logger = logging.getLogger(__name__)

SIGNATURE = "Best regards,\nSchool Management System Team"
FROM_NAME = "School Management System"
SMTP_TIMEOUT = 30


class EmailService:
    def __init__(self, server="", port=587, address="", password=""):
        self.server = server
        self.port = port
        self.address = address
        self.password = password
        self._mailer = None

    @classmethod
    def from_settings(cls, settings):
        return cls(settings.email_server, settings.email_port,
                   settings.email_address, settings.email_password)

    @property
    def enabled(self):
        return bool(self.server)

    def connection_config(self):
        # 465 es SMTPS; cualquier otro puerto negocia STARTTLS
        implicit_tls = self.port == 465
        return ConnectionConfig(
            MAIL_USERNAME=self.address,
            MAIL_PASSWORD=self.password,
            MAIL_FROM=self.address,
            MAIL_FROM_NAME=FROM_NAME,
            MAIL_PORT=self.port,
            MAIL_SERVER=self.server,
            MAIL_STARTTLS=not implicit_tls,
            MAIL_SSL_TLS=implicit_tls,
            USE_CREDENTIALS=bool(self.address and self.password),
            VALIDATE_CERTS=True,
            TIMEOUT=SMTP_TIMEOUT,
        )

    @property
    def mailer(self):
        if self._mailer is None:
            self._mailer = FastMail(self.connection_config())
        return self._mailer

    def _deliver(self, to, subject, body):
        try:
            message = MessageSchema(
                subject=subject,
                recipients=[to],
                body=body,
                subtype=MessageType.plain,
            )
            asyncio.run(self.mailer.send_message(message))
            logger.info("Email '%s' sent to %s", subject, to)
        except Exception:
            logger.exception("Could not send email '%s' to %s", subject, to)

    def send(self, to, subject, body):
        if not self.enabled:
            logger.info("Email disabled, skipping '%s' to %s", subject, to)
            return None
        thread = threading.Thread(target=self._deliver, args=(to, subject, body), daemon=True)
        thread.start()
        return thread

    def send_welcome(self, to, first_name, last_name, password):
        name = f"{first_name} {last_name}".strip()
        body = f"Hello {name},\n\n" if name else "Hello,\n\n"
        body += "You have been registered to the School Management System.\n"
        body += f"Your password is: {password}\n\n"
        body += SIGNATURE
        return self.send(to, "School Management System Registration", body)

    def send_grade(self, to, grade, out_of, course_name):
        body = "Hello,\n\n"
        body += f"You have received a grade of {grade} out of {out_of} for the course {course_name}.\n\n"
        body += SIGNATURE
        return self.send(to, "School Management System Grade", body)
