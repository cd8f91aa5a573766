from .db import db
from .user import User
from .audit_log import AuditLog
from .working_hours import WorkingHours
from .blocked_slot import BlockedSlot
from .appointment import Appointment
from .walk_in import WalkIn
from .waiting_queue import QueueEntry, QueueLane, AppointmentRef, WalkInRef
from .notification import Notification
