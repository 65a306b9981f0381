from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SURVEYOR = "SURVEYOR"
    INSTALLER = "INSTALLER"
    SUPPORT = "SUPPORT"


ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN)


class HistoryAction(str, Enum):
    UPDATE = "UPDATE"
    ROLLBACK = "ROLLBACK"


class MeasurementStatus(str, Enum):
    NEW = "NEW"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    CONVERTED = "CONVERTED"


class ContractStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    IN_PRODUCTION = "IN_PRODUCTION"
    INSTALLATION = "INSTALLATION"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
