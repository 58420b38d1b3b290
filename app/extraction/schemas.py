"""Expected shape of a French traffic fine notice (avis de contravention).

The JSON schema sent to the AI provider is derived from these models, and the
provider response is validated against them before normalization.
"""

from typing import Literal

from pydantic import BaseModel, Field


class FineIdentifiers(BaseModel):
    """Unique identifiers of the fine."""

    fine_number: str = Field(description="Notice number (numéro de l'avis de contravention)")
    barcode_reference: str | None = Field(
        default=None, description="Technical reference or barcode"
    )
    qr_code_present: bool = Field(description="Whether a QR code is printed on the notice")


class IssuingAuthority(BaseModel):
    """Authority that issued the notice."""

    country: Literal["FRANCE"] = Field(description="Issuing country")
    authority_name: str = Field(description="Issuing authority")
    website: str = Field(description="Official website for payment or contest")
    contact_phone: str | None = Field(default=None, description="Administration contact phone")


class NoticeDates(BaseModel):
    """Dates attached to the notice and the infraction."""

    notice_issue_date: str = Field(description="Date the notice was issued")
    infraction_date: str = Field(description="Date the infraction was recorded")
    infraction_time: str = Field(description="Time the infraction was recorded")


class OffenderAddress(BaseModel):
    street: str = Field(description="Postal address")
    postal_code: str = Field(description="Postal code")
    city: str = Field(description="City")
    country: Literal["FRANCE"] | None = Field(default=None, description="Country of residence")


class Offender(BaseModel):
    """Registration certificate holder."""

    full_name: str = Field(description="Full name of the registration certificate holder")
    address: OffenderAddress = Field(description="Offender address")


class Vehicle(BaseModel):
    license_plate: str = Field(description="Vehicle registration number")
    country_of_registration: Literal["FRANCE"] = Field(description="Registration country")
    brand: str = Field(description="Vehicle brand")
    vehicle_owner_role: str | None = Field(
        default=None, description="Role of the offender towards the vehicle"
    )


class Infraction(BaseModel):
    """Legal classification of the infraction."""

    infraction_category: str = Field(description="General infraction category")
    infraction_description: str = Field(description="Detailed infraction description")
    legal_references: list[str] = Field(description="Articles of law and legal references")
    infraction_code: str | None = Field(default=None, description="Internal infraction code")


class Location(BaseModel):
    street_name: str = Field(description="Exact place of the infraction")
    city: str = Field(description="City where the infraction was recorded")
    department_code: str = Field(description="Department code")
    country: Literal["FRANCE"] = Field(description="Country of the infraction")


class Enforcement(BaseModel):
    reporting_officer_id: str = Field(description="Reporting officer number")
    service_code: str = Field(description="Reporting service code")
    enforcement_agency: str | None = Field(default=None, description="Enforcement agency")


class Penalty(BaseModel):
    """Financial and administrative sanctions."""

    fine_type: Literal["amende_forfaitaire"] = Field(description="Fine type")
    base_amount_eur: float = Field(description="Fixed fine amount in euros")
    increased_amount_eur: float = Field(description="Increased fine amount in euros")
    payment_deadline_days: float = Field(description="Days before the amount increases")
    points_removed: float = Field(description="Licence points removed")


class ContestationAddress(BaseModel):
    recipient: str = Field(description="Contest recipient")
    street: str = Field(description="Contest postal address")
    postal_code: str = Field(description="Postal code")
    city: str = Field(description="City")


class PaymentAndContestation(BaseModel):
    payment_required_for_admission: bool = Field(
        description="Paying counts as admitting the infraction"
    )
    payment_website: str = Field(description="Official payment website")
    contestation_website: str = Field(description="Official contest website")
    contestation_requires_no_payment: bool = Field(
        description="A contest must be filed without paying first"
    )
    contestation_address: ContestationAddress = Field(description="Contest address")


class PostalInformation(BaseModel):
    delivery_service: str = Field(description="Mail delivery service")
    postal_center_code: str | None = Field(default=None, description="Postal centre code")


class DataProtection(BaseModel):
    personal_data_processing: bool = Field(description="Whether personal data is processed")
    data_retention_years: float | None = Field(default=None, description="Data retention period")
    data_controller: str | None = Field(default=None, description="Data controller")


class TrafficFineNotice(BaseModel):
    """Structured content of a traffic fine notice."""

    document_type: Literal["avis_de_contravention"] = Field(description="Type of document")
    fine_identifiers: FineIdentifiers
    issuing_authority: IssuingAuthority
    notice_dates: NoticeDates
    offender: Offender
    vehicle: Vehicle
    infraction: Infraction
    location: Location
    enforcement: Enforcement
    penalty: Penalty
    payment_and_contestation: PaymentAndContestation
    postal_information: PostalInformation
    data_protection: DataProtection
