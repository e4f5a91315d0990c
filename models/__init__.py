# models/__init__.py
from .roles import RoleEnum, DetailedRole, RequestStatus
from .user import User, Profile
from .college import College, Department, DepartmentRoom, DepartmentCode, DepartmentAdmin
from .requests import PendingDepartmentJoin, CollegeAdminRequest

__all__ = [
    "RoleEnum",
    "DetailedRole",
    "RequestStatus",
    "User",
    "Profile",
    "College",
    "Department",
    "DepartmentRoom",
    "DepartmentCode",
    "DepartmentAdmin",
    "PendingDepartmentJoin",
    "CollegeAdminRequest",
]
