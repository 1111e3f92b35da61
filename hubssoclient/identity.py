from dataclasses import asdict, dataclass
from typing import Optional


# What a successful Hub login hands to the session. Stored in the session
# as a plain dict, so every field must be JSON serializable.
@dataclass
class SessionIdentity:
    id: int
    email: str
    name: str
    username: str
    role: str
    locale: Optional[str]
    profile: Optional[dict]
    belongs_to_active_team: bool = False

    def as_dict(self):
        return asdict(self)
