from pydantic import BaseModel
from enum import Enum


# USER ROLE HIERARCHY
class UserRole(str, Enum):
    GUEST = "guest"                  # 👥 Browse only
    MEMBER = "member"                # 👤 Post toilets, review, report
    CRITIC = "critic"                # 📝 Featured reviewer
    MODERATOR = "moderator"          # 🛡️ Reviews reports, issues violations
    ADMINISTRATOR = "administrator"  # ⚙️ System administrator


REPORTER_ROLES = {UserRole.MEMBER, UserRole.CRITIC, UserRole.MODERATOR, UserRole.ADMINISTRATOR}
STAFF_ROLES = {UserRole.MODERATOR, UserRole.ADMINISTRATOR}


# IDENTITY CONTRACT (supplied by the upstream identity provider)
class CurrentUser(BaseModel):
    user_id: str
    role: UserRole = UserRole.MEMBER

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
