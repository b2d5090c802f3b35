"""도메인 열거값 정의.

Domain enumerations shared by models, schemas and services.
Literal aliases are used in pydantic schemas so unknown values are rejected
at the request boundary; the tuples are used for queries and aggregation.
"""

from typing import Literal, get_args

# 사용자 역할 (User roles)
UserRole = Literal["admin", "technician", "employee"]
# 사용자 상태 (Account status)
UserStatus = Literal["pending", "active", "inactive", "suspended"]

# 정비 요청 상태 (Maintenance request status)
RequestStatus = Literal[
    "New",
    "Assigned",
    "In Progress",
    "Waiting for Parts",
    "On Hold",
    "Completed",
    "Cancelled",
    "Rejected",
]
# 우선순위 (Priority levels)
Priority = Literal["Low", "Medium", "High", "Critical", "Emergency"]
# 긴급도/영향도 (Urgency and impact axes)
Severity = Literal["Low", "Medium", "High", "Critical"]
# 정비 유형 (Maintenance type)
MaintenanceType = Literal["Corrective", "Preventive", "Predictive", "Emergency"]
# 정비 요청 분류 (Request category)
RequestCategory = Literal[
    "Electrical",
    "Mechanical",
    "HVAC",
    "Plumbing",
    "IT/Electronics",
    "Safety",
    "Building",
    "Grounds",
    "Other",
]

# 설비 분류 (Equipment category)
EquipmentCategory = Literal[
    "HVAC",
    "Electrical",
    "Mechanical",
    "Plumbing",
    "IT/Electronics",
    "Safety Systems",
    "Building Systems",
    "Industrial Equipment",
    "Automotive",
    "Office Equipment",
    "Medical Equipment",
    "Other",
]
EquipmentStatus = Literal["Active", "Maintenance", "Out of Service", "Scrapped"]

# 팀/작업장 (Team and workshop)
TeamStatus = Literal["Active", "Inactive"]
TeamMemberRole = Literal["lead", "senior", "junior", "trainee"]
WorkshopStatus = Literal["Active", "Inactive", "Maintenance"]

USER_ROLES: tuple[str, ...] = get_args(UserRole)
REQUEST_STATUSES: tuple[str, ...] = get_args(RequestStatus)
PRIORITIES: tuple[str, ...] = get_args(Priority)
MAINTENANCE_TYPES: tuple[str, ...] = get_args(MaintenanceType)
REQUEST_CATEGORIES: tuple[str, ...] = get_args(RequestCategory)

# 종료 상태 (Terminal statuses)
TERMINAL_STATUSES: frozenset[str] = frozenset({"Completed", "Cancelled", "Rejected"})

# 설비 분류 → 요청 분류 매핑 (Equipment category mapped onto request category)
EQUIPMENT_TO_REQUEST_CATEGORY: dict[str, str] = {
    "HVAC": "HVAC",
    "Electrical": "Electrical",
    "Mechanical": "Mechanical",
    "Plumbing": "Plumbing",
    "IT/Electronics": "IT/Electronics",
    "Safety Systems": "Safety",
    "Building Systems": "Building",
}

# 캘린더 우선순위 색상 (Calendar colour per priority)
PRIORITY_COLORS: dict[str, str] = {
    "Emergency": "#dc2626",
    "Critical": "#ea580c",
    "High": "#d97706",
    "Medium": "#2563eb",
    "Low": "#16a34a",
}
