from .auth import AuthService
from .client import ApiClient
from .employee import EmployeeService
from .employer import EmployerService
from .matching import MatchingService

__all__ = [
    "ApiClient", "AuthService", "EmployeeService", "EmployerService", "MatchingService",
]
