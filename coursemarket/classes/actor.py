from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    """Identity on whose behalf an operation runs. Anonymous callers pass ``None``."""

    id: str
    role: str

    @property
    def is_instructor(self):
        return self.role == "instructor"

    @property
    def is_student(self):
        return self.role == "student"

    @classmethod
    def from_profile(cls, profile):
        return cls(id=profile.id, role=profile.role)

    @classmethod
    def from_token(cls, payload):
        """Build an actor from a decoded JWT payload, or ``None`` if it carries no identity."""
        if not payload or not payload.get("user_id"):
            return None
        return cls(id=payload["user_id"], role=payload.get("role", "student"))
