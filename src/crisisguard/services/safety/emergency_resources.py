"""
Crisis Resource Store

Read-only, jurisdiction-aware store of crisis hotlines and the
emergency contacts an escalation can be routed to.

LEGAL_REVIEW_REQUIRED: Every number and coverage area must be verified
for accuracy in each jurisdiction before production use.

ARCHITECTURE: Built-in resources can be overridden with a JSON file
(CRISISGUARD_MONITORING_RESOURCES_CONFIG_PATH). A malformed override
file is a ConfigurationError at startup, never a silent fallback.
"""

import json
import os
from dataclasses import dataclass
from typing import Optional

from crisisguard.config.logging_config import get_logger
from crisisguard.domain.exceptions import ConfigurationError

logger = get_logger(__name__)


@dataclass(frozen=True)
class EmergencyResource:
    """
    A crisis hotline or text line shown to a user.

    Attributes:
        name: Resource name (e.g., "988 Suicide & Crisis Lifeline")
        resource_type: hotline, text, website or chat
        contact: Number, short code or URL
        description: Brief description
        available_24_7: Whether available around the clock
        languages: Supported ISO 639-1 languages
    """

    name: str
    resource_type: str
    contact: str
    description: str = ""
    available_24_7: bool = True
    languages: tuple[str, ...] = ("en",)

    def supports(self, language: str) -> bool:
        return language in self.languages

    def format_for_user(self) -> str:
        availability = " (24/7)" if self.available_24_7 else ""
        return f"{self.name}: {self.contact}{availability}"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.resource_type,
            "contact": self.contact,
            "description": self.description,
            "available_24_7": self.available_24_7,
            "languages": list(self.languages),
        }


@dataclass(frozen=True)
class JurisdictionResources:
    """Crisis resources for one country."""

    country_code: str
    country_name: str
    emergency_number: str = ""
    resources: tuple[EmergencyResource, ...] = ()

    def hotlines(self) -> tuple[EmergencyResource, ...]:
        return tuple(r for r in self.resources if r.resource_type == "hotline")

    def for_language(self, language: str) -> tuple[EmergencyResource, ...]:
        """Resources in the language first, then the rest."""
        preferred = [r for r in self.resources if r.supports(language)]
        others = [r for r in self.resources if not r.supports(language)]
        return tuple(preferred + others)


@dataclass(frozen=True)
class EmergencyContact:
    """
    A service an escalation can be routed to.

    Ranked by success_rate * 0.7 + (1 / average_response_ms) * 0.3.
    """

    contact_id: str
    contact_type: str
    name: str
    primary_number: str
    backup_numbers: tuple[str, ...] = ()
    text_support: bool = False
    web_url: Optional[str] = None
    description: str = ""
    specializations: tuple[str, ...] = ()
    geographic_coverage: tuple[str, ...] = ()
    languages: tuple[str, ...] = ("en",)
    availability: str = "24/7"
    average_response_ms: int = 60_000
    success_rate: float = 0.9

    @property
    def rank_score(self) -> float:
        return self.success_rate * 0.7 + (1 / max(1, self.average_response_ms)) * 0.3

    def covers(self, location: str) -> bool:
        needle = location.lower()
        return any(needle in geo.lower() for geo in self.geographic_coverage)

    def to_dict(self) -> dict:
        return {
            "contact_id": self.contact_id,
            "type": self.contact_type,
            "name": self.name,
            "primary_number": self.primary_number,
            "backup_numbers": list(self.backup_numbers),
            "text_support": self.text_support,
            "web_url": self.web_url,
            "description": self.description,
            "specializations": list(self.specializations),
            "coverage": {
                "geographic": list(self.geographic_coverage),
                "languages": list(self.languages),
            },
            "availability": self.availability,
            "average_response_ms": self.average_response_ms,
            "success_rate": self.success_rate,
        }


DEFAULT_RESOURCES = JurisdictionResources(
    country_code="INTL",
    country_name="International",
    resources=(
        EmergencyResource(
            name="International Association for Suicide Prevention",
            resource_type="website",
            contact="https://www.iasp.info/resources/Crisis_Centres/",
            description="Directory of crisis centers worldwide",
        ),
        EmergencyResource(
            name="Befrienders Worldwide",
            resource_type="website",
            contact="https://www.befrienders.org/",
            description="Emotional support centers globally",
        ),
    ),
)

# LEGAL_REVIEW_REQUIRED: verify all numbers before production
BUILT_IN_RESOURCES: dict[str, JurisdictionResources] = {
    "US": JurisdictionResources(
        country_code="US",
        country_name="United States",
        emergency_number="911",
        resources=(
            EmergencyResource(
                name="988 Suicide & Crisis Lifeline",
                resource_type="hotline",
                contact="988",
                description="National suicide prevention and crisis support",
                languages=("en", "es"),
            ),
            EmergencyResource(
                name="Crisis Text Line",
                resource_type="text",
                contact="Text HOME to 741741",
                description="Text-based crisis support",
            ),
            EmergencyResource(
                name="Crisis Text Line (español)",
                resource_type="text",
                contact="Envía HOLA al 741741",
                description="Apoyo en crisis por mensaje de texto",
                languages=("es",),
            ),
        ),
    ),
    "CA": JurisdictionResources(
        country_code="CA",
        country_name="Canada",
        emergency_number="911",
        resources=(
            EmergencyResource(
                name="9-8-8 Suicide Crisis Helpline",
                resource_type="hotline",
                contact="988",
                description="National suicide crisis helpline",
                languages=("en", "fr"),
            ),
            EmergencyResource(
                name="Crisis Text Line",
                resource_type="text",
                contact="Text HOME to 741741",
                description="Text-based crisis support",
            ),
        ),
    ),
    "GB": JurisdictionResources(
        country_code="GB",
        country_name="United Kingdom",
        emergency_number="999",
        resources=(
            EmergencyResource(
                name="Samaritans",
                resource_type="hotline",
                contact="116 123",
                description="Emotional support for anyone in distress",
            ),
            EmergencyResource(
                name="SHOUT",
                resource_type="text",
                contact="Text SHOUT to 85258",
                description="Text-based mental health support",
            ),
        ),
    ),
    "SA": JurisdictionResources(
        country_code="SA",
        country_name="Saudi Arabia",
        emergency_number="911",
        resources=(
            EmergencyResource(
                name="Mental Health Hotline",
                resource_type="hotline",
                contact="920033360",
                description="National mental health support line",
                languages=("ar", "en"),
            ),
        ),
    ),
}

BUILT_IN_CONTACTS: tuple[EmergencyContact, ...] = (
    EmergencyContact(
        contact_id="emergency-911",
        contact_type="emergency-services",
        name="Emergency Services (911)",
        primary_number="911",
        description="Emergency services for life-threatening situations",
        specializations=("medical-emergency", "police", "fire"),
        geographic_coverage=("US", "Canada"),
        languages=("en", "es"),
        average_response_ms=180_000,
        success_rate=0.98,
    ),
    EmergencyContact(
        contact_id="suicide-prevention-988",
        contact_type="crisis-hotline",
        name="988 Suicide & Crisis Lifeline",
        primary_number="988",
        backup_numbers=("1-800-273-8255",),
        text_support=True,
        web_url="https://988lifeline.org",
        description="National suicide prevention and crisis support",
        specializations=("suicide-prevention", "crisis-support", "mental-health"),
        geographic_coverage=("US",),
        languages=("en", "es"),
        average_response_ms=60_000,
        success_rate=0.95,
    ),
    EmergencyContact(
        contact_id="crisis-text-line",
        contact_type="crisis-hotline",
        name="Crisis Text Line",
        primary_number="741741",
        text_support=True,
        web_url="https://www.crisistextline.org",
        description="Text-based crisis support and counseling",
        specializations=("text-counseling", "crisis-support", "youth-support"),
        geographic_coverage=("US", "Canada", "UK"),
        languages=("en",),
        average_response_ms=300_000,
        success_rate=0.92,
    ),
)


class EmergencyResourceResolver:
    """
    Jurisdiction-aware crisis resource resolver.

    Usage:
        resolver = EmergencyResourceResolver()
        resources = resolver.get_resources("US")
        lines = resolver.resource_lines("US", language="es")
        contacts = resolver.get_emergency_contacts("US", "en")
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        contacts: tuple[EmergencyContact, ...] = BUILT_IN_CONTACTS,
    ) -> None:
        """
        Initialize resolver.

        Args:
            config_path: Optional JSON file overriding built-in resources
            contacts: Emergency contacts escalations can be routed to

        Raises:
            ConfigurationError: If config_path is given but unusable
        """
        self._resources = dict(BUILT_IN_RESOURCES)
        self._contacts = contacts

        if config_path:
            self._load_config(config_path)

    def _load_config(self, config_path: str) -> None:
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Crisis resources file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            for country_code, country_data in data.items():
                resources = tuple(
                    EmergencyResource(
                        **{**r, "languages": tuple(r.get("languages", ("en",)))}
                    )
                    for r in country_data.get("resources", [])
                )
                code = country_code.upper()
                self._resources[code] = JurisdictionResources(
                    country_code=code,
                    country_name=country_data.get("country_name", code),
                    emergency_number=country_data.get("emergency_number", ""),
                    resources=resources,
                )
        except (OSError, ValueError, TypeError, AttributeError) as e:
            raise ConfigurationError(
                f"Invalid crisis resources file {config_path}: {e}"
            ) from e

        logger.info(
            "Loaded crisis resources config",
            path=config_path,
            jurisdiction_count=len(data),
        )

    def get_resources(self, country_code: Optional[str]) -> JurisdictionResources:
        """
        Get resources for a country, falling back to international ones.

        Args:
            country_code: ISO 3166-1 alpha-2 code (e.g., "US")
        """
        code = (country_code or "").strip().upper()
        if code in self._resources:
            return self._resources[code]

        logger.warning("No resources for jurisdiction, using default", country_code=code)
        return DEFAULT_RESOURCES

    def resource_lines(
        self,
        country_code: Optional[str],
        language: str = "en",
        include_emergency: bool = True,
        limit: int = 3,
    ) -> tuple[str, ...]:
        """Formatted resource lines, language matches first."""
        jurisdiction = self.get_resources(country_code)
        lines: list[str] = []
        if include_emergency and jurisdiction.emergency_number:
            lines.append(f"Emergency: {jurisdiction.emergency_number}")
        lines.extend(
            r.format_for_user() for r in jurisdiction.for_language(language)[:limit]
        )
        return tuple(lines)

    def format_crisis_message(
        self,
        country_code: Optional[str] = "US",
        language: str = "en",
        include_emergency: bool = True,
    ) -> str:
        """Format a crisis message listing the top resources."""
        lines = ["If you're in crisis or having thoughts of self-harm:"]
        lines.extend(
            f"- {line}"
            for line in self.resource_lines(country_code, language, include_emergency)
        )
        lines.append("You don't have to face this alone. Support is available right now.")
        return "\n".join(lines)

    def get_primary_hotline(self, country_code: Optional[str]) -> Optional[EmergencyResource]:
        hotlines = self.get_resources(country_code).hotlines()
        return hotlines[0] if hotlines else None

    def get_emergency_contacts(
        self,
        location: Optional[str] = None,
        language: str = "en",
    ) -> list[EmergencyContact]:
        """
        Emergency contacts for a location and language.

        A contact qualifies when its coverage mentions the location
        (substring, case-insensitive) and it supports the language or
        English. Sorted best first.
        """
        contacts = [
            c for c in self._contacts
            if (not location or c.covers(location))
            and (language in c.languages or "en" in c.languages)
        ]
        return sorted(contacts, key=lambda c: c.rank_score, reverse=True)

    def list_supported_countries(self) -> list[str]:
        return sorted(self._resources)
