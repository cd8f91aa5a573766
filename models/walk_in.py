from datetime import datetime
from models.db import db
from models.status import WAITING

class WalkIn(db.Model):
    __tablename__ = "walk_ins"

    id = db.Column(db.Integer, primary_key=True)

    customer_name = db.Column(db.String(120), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(30), nullable=True)

    barber_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True)
    arrival_time = db.Column(db.String(5), nullable=False)
    start_time = db.Column(db.String(5), nullable=True)
    end_time = db.Column(db.String(5), nullable=True)
    estimated_time = db.Column(db.Integer, nullable=False)

    service = db.Column(db.String(80), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=WAITING, index=True)
    token_number = db.Column(db.String(40), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("estimated_time BETWEEN 5 AND 300", name="ck_walk_in_estimated_time"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "customer": {
                "name": self.customer_name,
                "email": self.customer_email,
                "phone": self.customer_phone,
            },
            "barber_id": self.barber_id,
            "date": self.date,
            "arrival_time": self.arrival_time,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "estimated_time": self.estimated_time,
            "service": self.service,
            "status": self.status,
            "token_number": self.token_number,
        }
