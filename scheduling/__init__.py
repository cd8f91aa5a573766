"""
Scheduling core

- Time arithmetic over HH:MM strings (time_utils.py)
- Free-interval calculation (availability.py)
- Slot checks and suggestions (slots.py)
- Queue sequencing (queue.py)
- Queue tokens (tokens.py)
- Booking intake and roster management (intake.py, roster.py)
- Scheduled tasks (tasks.py)
"""
