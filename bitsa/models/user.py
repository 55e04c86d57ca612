from werkzeug.security import generate_password_hash, check_password_hash

from bitsa import db
from bitsa.models.enums import UserRole, ADMIN_ROLES


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    # Membership / student number used to log in
    student_id = db.Column(db.String(30), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    phone = db.Column(db.String(30))
    course = db.Column(db.String(150))
    year_of_study = db.Column(db.Integer)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(UserRole, name="user_role"), default=UserRole.STUDENT, nullable=False
    )
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now(),
        nullable=False,
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role in ADMIN_ROLES

    def __repr__(self):
        return f"<User {self.student_id}>"

    def summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "student_id": self.student_id,
            "email": self.email,
        }
