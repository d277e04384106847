# Database models
from .blood_unit import BloodUnit, BloodGroup, ComponentType, UnitStatus
from .user import User, UserRole, EligibilityStatus, SELF_REGISTERABLE_ROLES
from .blood_bank import BloodBank
from .blood_request import BloodRequest, RequestStatus, RequestUrgency, blood_request_units
from .appointment import Appointment, AppointmentStatus
