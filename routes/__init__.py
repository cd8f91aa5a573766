from .health import health_bp
from .availability import availability_bp
from .appointments import appointments_bp
from .walk_ins import walk_ins_bp
from .queue import queue_bp
from .roster import roster_bp
