from datetime import datetime
from models.db import db
from models.status import PENDING_APPROVAL

class Appointment(db.Model):
    __tablename__ = "appointments"

    id = db.Column(db.Integer, primary_key=True)

    customer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    # snapshot of the customer at booking time
    customer_name = db.Column(db.String(120), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False)
    customer_phone = db.Column(db.String(30), nullable=True)

    barber_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True)
    requested_time = db.Column(db.String(5), nullable=False)
    start_time = db.Column(db.String(5), nullable=True)  # null until confirmed
    end_time = db.Column(db.String(5), nullable=True)
    estimated_time = db.Column(db.Integer, nullable=False)  # service duration, minutes

    service = db.Column(db.String(80), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=PENDING_APPROVAL, index=True)
    token_number = db.Column(db.String(40), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        # Same customer cannot book the same instant twice
        db.UniqueConstraint("customer_email", "date", "requested_time", name="uq_appointment_customer_slot"),
        db.CheckConstraint("estimated_time BETWEEN 5 AND 300", name="ck_appointment_estimated_time"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "customer": {
                "name": self.customer_name,
                "email": self.customer_email,
                "phone": self.customer_phone,
            },
            "barber_id": self.barber_id,
            "date": self.date,
            "requested_time": self.requested_time,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "estimated_time": self.estimated_time,
            "service": self.service,
            "status": self.status,
            "token_number": self.token_number,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
