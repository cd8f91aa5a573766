from datetime import datetime
from models.db import db

class WorkingHours(db.Model):
    __tablename__ = "working_hours"

    id = db.Column(db.Integer, primary_key=True)

    barber_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True)  # YYYY-MM-DD
    start_time = db.Column(db.String(5), nullable=False)  # HH:MM
    end_time = db.Column(db.String(5), nullable=False)
    is_available = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        # One working window per barber per day
        db.UniqueConstraint("barber_id", "date", name="uq_working_hours_barber_date"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "barber_id": self.barber_id,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "is_available": self.is_available,
        }
