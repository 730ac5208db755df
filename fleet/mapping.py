"""
Row <-> object conversion for every table in the data file.

Rows use the snake_case column names of the hosted database the fleet data
was exported from. This module is the only place that knows those keys.
"""

from typing import Any, Dict

from .department import ActivityLog, Department
from .maintenance_event import MaintenanceEvent
from .service_provider import ServiceProvider
from .status import MaintenanceStatus, MaintenanceType, UserRole, VehicleStatus
from .user import User
from .vehicle import Vehicle


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values for cleaner YAML."""
    return {k: v for k, v in d.items() if v is not None}


def event_from_row(row: Dict[str, Any]) -> MaintenanceEvent:
    return MaintenanceEvent(
        id=row.get("id"),
        vehicle_id=row["vehicle_id"],
        title=row["title"],
        description=row.get("description") or "",
        type=MaintenanceType(row["type"]),
        status=MaintenanceStatus(row["status"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        # 0 is stored for "no cost" by older rows
        cost=row.get("cost") or None,
        service_provider_id=row.get("service_provider_id"),
        created_by=row["created_by"],
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def event_to_row(event: MaintenanceEvent) -> Dict[str, Any]:
    return _compact(
        {
            "id": event.id,
            "vehicle_id": event.vehicle_id,
            "title": event.title,
            "description": event.description,
            "type": event.type.value,
            "status": event.status.value,
            "start_date": event.start_date,
            "end_date": event.end_date,
            "cost": event.cost,
            "service_provider_id": event.service_provider_id,
            "created_by": event.created_by,
            "created_at": event.created_at,
            "updated_at": event.updated_at,
        }
    )


def vehicle_from_row(row: Dict[str, Any]) -> Vehicle:
    return Vehicle(
        id=row.get("id"),
        make=row["make"],
        model=row["model"],
        year=row["year"],
        license_plate=row["license_plate"],
        vin=row.get("vin") or "",
        color=row.get("color") or "",
        status=VehicleStatus(row.get("status") or "active"),
        mileage=row.get("mileage") or 0,
        odometer_reading=row.get("odometer_reading") or 0,
        purchase_date=row.get("purchase_date"),
        fuel_type=row.get("fuel_type") or "gasoline",
        assigned_driver_id=row.get("assigned_driver_id"),
        image_url=row.get("image_url"),
        insurance_policy=row.get("insurance_policy"),
        insurance_expiry=row.get("insurance_expiry"),
        last_maintenance_date=row.get("last_maintenance_date"),
        next_maintenance_date=row.get("next_maintenance_date"),
        notes=row.get("notes"),
        created_at=row.get("created_at"),
    )


def vehicle_to_row(vehicle: Vehicle) -> Dict[str, Any]:
    return _compact(
        {
            "id": vehicle.id,
            "make": vehicle.make,
            "model": vehicle.model,
            "year": vehicle.year,
            "license_plate": vehicle.license_plate,
            "vin": vehicle.vin,
            "color": vehicle.color,
            "status": vehicle.status.value,
            "mileage": vehicle.mileage,
            "odometer_reading": vehicle.odometer_reading,
            "purchase_date": vehicle.purchase_date,
            "fuel_type": vehicle.fuel_type,
            "assigned_driver_id": vehicle.assigned_driver_id,
            "image_url": vehicle.image_url,
            "insurance_policy": vehicle.insurance_policy,
            "insurance_expiry": vehicle.insurance_expiry,
            "last_maintenance_date": vehicle.last_maintenance_date,
            "next_maintenance_date": vehicle.next_maintenance_date,
            "notes": vehicle.notes,
            "created_at": vehicle.created_at,
        }
    )


def user_from_row(row: Dict[str, Any]) -> User:
    return User(
        id=row.get("id"),
        email=row["email"],
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        role=UserRole(row.get("role") or "staff"),
        position=row.get("position"),
        department_id=row.get("department_id"),
        institution_id=row.get("institution_id"),
        phone=row.get("phone"),
        image_url=row.get("image_url"),
        license_image_url=row.get("license_image_url"),
        created_at=row.get("created_at"),
    )


def user_to_row(user: User) -> Dict[str, Any]:
    return _compact(
        {
            "id": user.id,
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "role": user.role.value,
            "position": user.position,
            "department_id": user.department_id,
            "institution_id": user.institution_id,
            "phone": user.phone,
            "image_url": user.image_url,
            "license_image_url": user.license_image_url,
            "created_at": user.created_at,
        }
    )


def provider_from_row(row: Dict[str, Any]) -> ServiceProvider:
    return ServiceProvider(
        id=row.get("id"),
        name=row["name"],
        type=row.get("type") or "general",
        address=row.get("address") or "",
        city=row.get("city") or "",
        state=row.get("state") or "",
        zip_code=row.get("zip_code") or "",
        contact_person=row.get("contact_person") or "",
        contact_email=row.get("contact_email") or "",
        contact_phone=row.get("contact_phone") or "",
        specialties=row.get("specialties"),
        rating=row.get("rating") or 0,
        is_active=row.get("is_active", True),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def provider_to_row(provider: ServiceProvider) -> Dict[str, Any]:
    return _compact(
        {
            "id": provider.id,
            "name": provider.name,
            "type": provider.type,
            "address": provider.address,
            "city": provider.city,
            "state": provider.state,
            "zip_code": provider.zip_code,
            "contact_person": provider.contact_person,
            "contact_email": provider.contact_email,
            "contact_phone": provider.contact_phone,
            "specialties": list(provider.specialties or []),
            "rating": provider.rating,
            "is_active": provider.is_active,
            "created_at": provider.created_at,
            "updated_at": provider.updated_at,
        }
    )


def department_from_row(row: Dict[str, Any]) -> Department:
    return Department(
        id=row.get("id"),
        name=row["name"],
        description=row.get("description"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def department_to_row(department: Department) -> Dict[str, Any]:
    return _compact(
        {
            "id": department.id,
            "name": department.name,
            "description": department.description,
            "created_at": department.created_at,
            "updated_at": department.updated_at,
        }
    )


def activity_from_row(row: Dict[str, Any]) -> ActivityLog:
    return ActivityLog(
        id=row.get("id"),
        user_id=row["user_id"],
        action=row["action"],
        entity=row["entity"],
        entity_id=row.get("entity_id"),
        description=row.get("description"),
        created_at=row.get("created_at"),
    )


def activity_to_row(log: ActivityLog) -> Dict[str, Any]:
    return _compact(
        {
            "id": log.id,
            "user_id": log.user_id,
            "action": log.action,
            "entity": log.entity,
            "entity_id": log.entity_id,
            "description": log.description,
            "created_at": log.created_at,
        }
    )
