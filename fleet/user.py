"""User class for staff and drivers."""
from typing import Optional

from .status import UserRole


class User:
    """A person with access to the fleet, possibly a driver."""

    def __init__(
            self,
            email: str,
            first_name: str,
            last_name: str,
            role: UserRole = UserRole.STAFF,
            position: Optional[str] = None,
            department_id: Optional[str] = None,
            institution_id: Optional[str] = None,
            phone: Optional[str] = None,
            image_url: Optional[str] = None,
            license_image_url: Optional[str] = None,
            id: Optional[str] = None,
            created_at: Optional[str] = None,
    ):
        self.id = id
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.role = role
        self.position = position
        self.department_id = department_id
        self.institution_id = institution_id
        self.phone = phone
        self.image_url = image_url
        self.license_image_url = license_image_url
        self.created_at = created_at

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER
