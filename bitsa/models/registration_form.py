from bitsa import db


class RegistrationForm(db.Model):
    __tablename__ = "registration_forms"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(
        db.Integer,
        db.ForeignKey("events.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    requires_approval = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(
        db.DateTime, server_default=db.func.now(), onupdate=db.func.now(), nullable=False
    )

    event = db.relationship("Event", back_populates="registration_form")
    fields = db.relationship(
        "RegistrationField",
        back_populates="form",
        order_by="RegistrationField.order",
        cascade="all, delete-orphan",
        lazy=True,
    )
    submissions = db.relationship(
        "RegistrationSubmission",
        back_populates="form",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def __repr__(self):
        return f"<RegistrationForm Event:{self.event_id}>"


class RegistrationField(db.Model):
    __tablename__ = "registration_fields"

    id = db.Column(db.Integer, primary_key=True)
    form_id = db.Column(
        db.Integer,
        db.ForeignKey("registration_forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    label = db.Column(db.String(200), nullable=False)
    field_type = db.Column(db.String(30), nullable=False)
    placeholder = db.Column(db.String(200))
    required = db.Column(db.Boolean, default=False, nullable=False)
    options = db.Column(db.JSON, default=list)
    order = db.Column(db.Integer, nullable=False, default=0)
    # Rule set such as {"max_length": 200}; stored as given
    validation = db.Column(db.JSON)

    form = db.relationship("RegistrationForm", back_populates="fields")

    def __repr__(self):
        return f"<RegistrationField {self.label!r} #{self.order}>"
