"""Vehicle class for fleet vehicle records."""

from typing import Optional

from .status import VehicleStatus


class Vehicle:
    """Vehicle identification, assignment and service dates."""

    def __init__(
        self,
        make: str,
        model: str,
        year: int,
        license_plate: str,
        vin: str = "",
        color: str = "",
        status: VehicleStatus = VehicleStatus.ACTIVE,
        mileage: float = 0,
        odometer_reading: float = 0,
        purchase_date: Optional[str] = None,
        fuel_type: str = "gasoline",
        assigned_driver_id: Optional[str] = None,
        image_url: Optional[str] = None,
        insurance_policy: Optional[str] = None,
        insurance_expiry: Optional[str] = None,
        last_maintenance_date: Optional[str] = None,
        next_maintenance_date: Optional[str] = None,
        notes: Optional[str] = None,
        id: Optional[str] = None,
        created_at: Optional[str] = None,
    ):
        self.id = id
        self.make = make
        self.model = model
        self.year = year
        self.license_plate = license_plate
        self.vin = vin
        self.color = color
        self.status = status
        self.mileage = mileage
        self.odometer_reading = odometer_reading
        self.purchase_date = purchase_date
        self.fuel_type = fuel_type
        self.assigned_driver_id = assigned_driver_id
        self.image_url = image_url
        self.insurance_policy = insurance_policy
        self.insurance_expiry = insurance_expiry
        self.last_maintenance_date = last_maintenance_date
        self.next_maintenance_date = next_maintenance_date
        self.notes = notes
        self.created_at = created_at

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        return f"{self.year} {self.make} {self.model}"
