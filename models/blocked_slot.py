from datetime import datetime
from models.db import db

class BlockedSlot(db.Model):
    __tablename__ = "blocked_slots"

    id = db.Column(db.Integer, primary_key=True)

    barber_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "barber_id": self.barber_id,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "reason": self.reason,
        }
