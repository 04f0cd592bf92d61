from enum import Enum


class UserRole(str, Enum):
    PROJECT_MANAGER = "Project Manager"
    TEAM_LEAD = "Team Lead"
    DEVELOPER = "Developer"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    CREATE_USERS = "create_users"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    BATCH_DELETE_USERS = "batch_delete_users"

    def __str__(self):
        return self.value
