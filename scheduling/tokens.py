import uuid

from scheduling.settings import SchedulingSettings
from scheduling.time_utils import compact_date, format_date_key


class TokenGenerator:
    """
    Human-readable queue tokens: {PREFIX}-{YYYYMMDD}-{XXXX}.

    The 4-char suffix is not globally unique; the waiting queue's unique
    constraint on token_number catches collisions and the queue manager
    regenerates.
    """

    def __init__(self, settings: SchedulingSettings):
        self.settings = settings

    def generate(self, kind: str, day) -> str:
        kind = (kind or "").lower()
        prefix = self.settings.token_prefixes.get(kind)
        if not prefix:
            raise ValueError('Invalid token type. Must be "appointment" or "walkin"')

        suffix = uuid.uuid4().hex[:4].upper()
        delim = self.settings.token_delimiter
        return f"{prefix}{delim}{compact_date(format_date_key(day))}{delim}{suffix}"
