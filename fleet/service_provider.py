"""ServiceProvider class for workshops that perform maintenance."""
from typing import List, Optional


class ServiceProvider:
    """A workshop or technician that maintenance can be assigned to."""

    def __init__(
            self,
            name: str,
            type: str = "general",
            address: str = "",
            city: str = "",
            state: str = "",
            zip_code: str = "",
            contact_person: str = "",
            contact_email: str = "",
            contact_phone: str = "",
            specialties: Optional[List[str]] = None,
            rating: float = 0,
            is_active: bool = True,
            id: Optional[str] = None,
            created_at: Optional[str] = None,
            updated_at: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.type = type
        self.address = address
        self.city = city
        self.state = state
        self.zip_code = zip_code
        self.contact_person = contact_person
        self.contact_email = contact_email
        self.contact_phone = contact_phone
        self.specialties = specialties or []
        self.rating = rating
        self.is_active = is_active if is_active is not None else True
        self.created_at = created_at
        self.updated_at = updated_at
