# api/utils/__init__.py
from api.utils.serializers import (
    profile_to_dict,
    college_to_dict,
    department_to_dict,
    room_to_dict,
    join_to_dict,
    member_to_dict,
    college_request_to_dict,
)

__all__ = [
    "profile_to_dict",
    "college_to_dict",
    "department_to_dict",
    "room_to_dict",
    "join_to_dict",
    "member_to_dict",
    "college_request_to_dict",
]
