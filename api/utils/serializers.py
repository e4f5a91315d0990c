# api/utils/serializers.py


def _iso(value):
    return value.isoformat() if value else None


def profile_to_dict(profile) -> dict | None:
    if profile is None:
        return None
    return {
        "id": profile.id,
        "name": profile.name,
        "role": profile.role.value if profile.role else None,
        "detailed_role": profile.detailed_role,
        "is_hod": bool(profile.is_hod),
        "college_id": profile.college_id,
        "department_id": profile.department_id,
        "room_id": profile.room_id,
        "is_active": bool(profile.is_active),
        "pending_approval": bool(profile.pending_approval),
        "is_degraded": bool(profile.is_degraded),
    }


def college_to_dict(college) -> dict:
    return {
        "id": college.id,
        "name": college.name,
        "code": college.code,
        "address": college.address,
        "is_active": college.is_active,
    }


def department_to_dict(department) -> dict:
    return {
        "id": department.id,
        "college_id": department.college_id,
        "name": department.name,
        "code": department.code,
        "description": department.description,
        "is_active": department.is_active,
    }


def room_to_dict(room) -> dict:
    return {
        "id": room.id,
        "department_id": room.department_id,
        "room_name": room.room_name,
        "room_code": room.room_code,
        "max_students": room.max_students,
        "max_teachers": room.max_teachers,
        "room_admin": room.room_admin,
        "is_active": room.is_active,
    }


def join_to_dict(join) -> dict:
    requester = join.requester
    return {
        "id": join.id,
        "user_id": join.user_id,
        "user_name": requester.name if requester else None,
        "department_id": join.department_id,
        "join_code": join.join_code,
        "user_role": join.user_role,
        "status": join.status,
        "created_at": _iso(join.created_at),
    }


def college_request_to_dict(req) -> dict:
    return {
        "id": req.id,
        "user_id": req.user_id,
        "college_name": req.college_name,
        "college_code": req.college_code,
        "college_address": req.college_address,
        "admin_name": req.admin_name,
        "admin_email": req.admin_email,
        "phone": req.phone,
        "website": req.website,
        "status": req.status,
        "approved_by": req.approved_by,
        "approved_at": _iso(req.approved_at),
        "rejection_reason": req.rejection_reason,
        "created_at": _iso(req.created_at),
    }


def member_to_dict(profile) -> dict:
    data = profile_to_dict(profile)
    data["email"] = profile.user.email if profile.user else None
    return data
