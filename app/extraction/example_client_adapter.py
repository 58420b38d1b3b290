"""Example extraction client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseExtractionClient and register the provider in ExtractionClientFactory.
"""

import json
from typing import ClassVar

from app.extraction.client_base import BaseExtractionClient
from app.extraction.models import ExtractionRequest, UploadedFile


class ExampleClientAdapter(BaseExtractionClient):
    """Example adapter that returns a fixed valid traffic fine notice.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "document_type": "avis_de_contravention",
        "fine_identifiers": {
            "fine_number": "1234567890",
            "qr_code_present": True,
        },
        "issuing_authority": {
            "country": "FRANCE",
            "authority_name": "Agence Nationale de Traitement Automatisé des Infractions",
            "website": "https://www.antai.gouv.fr",
        },
        "notice_dates": {
            "notice_issue_date": "12/03/2024",
            "infraction_date": "05/03/2024",
            "infraction_time": "14:32",
        },
        "offender": {
            "full_name": "PERSON_1",
            "address": {
                "street": "1 rue de l'Exemple",
                "postal_code": "75001",
                "city": "Paris",
            },
        },
        "vehicle": {
            "license_plate": "AB-123-CD",
            "country_of_registration": "FRANCE",
            "brand": "RENAULT",
        },
        "infraction": {
            "infraction_category": "Excès de vitesse",
            "infraction_description": "Excès de vitesse inférieur à 20 km/h",
            "legal_references": ["Art. R413-14 C.route"],
        },
        "location": {
            "street_name": "Boulevard Périphérique",
            "city": "Paris",
            "department_code": "75",
            "country": "FRANCE",
        },
        "enforcement": {
            "reporting_officer_id": "000123",
            "service_code": "75001",
        },
        "penalty": {
            "fine_type": "amende_forfaitaire",
            "base_amount_eur": 135,
            "increased_amount_eur": 375,
            "payment_deadline_days": 45,
            "points_removed": 1,
        },
        "payment_and_contestation": {
            "payment_required_for_admission": True,
            "payment_website": "https://www.amendes.gouv.fr",
            "contestation_website": "https://www.antai.gouv.fr",
            "contestation_requires_no_payment": True,
            "contestation_address": {
                "recipient": "Officier du Ministère Public",
                "street": "CS 41101",
                "postal_code": "35911",
                "city": "Rennes Cedex 9",
            },
        },
        "postal_information": {"delivery_service": "La Poste"},
        "data_protection": {"personal_data_processing": True},
    }

    def __init__(self) -> None:
        pass

    def generate_content(self, request: ExtractionRequest) -> str | None:
        _ = request
        return json.dumps(self.DEFAULT_RESPONSE)

    def upload_file(self, data: bytes, mime_type: str) -> UploadedFile:
        return UploadedFile(
            uri="example://uploaded-document",
            name="files/example",
            size_bytes=len(data),
            mime_type=mime_type,
        )
