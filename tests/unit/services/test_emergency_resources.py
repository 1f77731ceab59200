"""
Unit Tests for Crisis Resource Store

Tests jurisdiction lookup, formatting, emergency contact ranking and
the JSON override file.
"""

import json
from pathlib import Path

import pytest

from crisisguard.domain.exceptions import ConfigurationError
from crisisguard.services.safety.emergency_resources import (
    DEFAULT_RESOURCES,
    EmergencyResourceResolver,
)


class TestJurisdictionLookup:
    """Tests for jurisdiction resources."""

    @pytest.fixture
    def resolver(self) -> EmergencyResourceResolver:
        return EmergencyResourceResolver()

    def test_us_resources(self, resolver: EmergencyResourceResolver) -> None:
        resources = resolver.get_resources("us")

        assert resources.country_code == "US"
        assert resources.emergency_number == "911"

    def test_unknown_country_uses_default(self, resolver: EmergencyResourceResolver) -> None:
        assert resolver.get_resources("ZZ") is DEFAULT_RESOURCES
        assert resolver.get_resources(None) is DEFAULT_RESOURCES

    def test_primary_hotline(self, resolver: EmergencyResourceResolver) -> None:
        hotline = resolver.get_primary_hotline("GB")

        assert hotline is not None
        assert hotline.name == "Samaritans"
        assert resolver.get_primary_hotline("ZZ") is None

    def test_resource_lines_prefer_language(self, resolver: EmergencyResourceResolver) -> None:
        """Test language matches come first after the emergency number."""
        lines = resolver.resource_lines("US", language="es")

        assert lines == (
            "Emergency: 911",
            "988 Suicide & Crisis Lifeline: 988 (24/7)",
            "Crisis Text Line (español): Envía HOLA al 741741 (24/7)",
            "Crisis Text Line: Text HOME to 741741 (24/7)",
        )

    def test_resource_lines_without_emergency(self, resolver: EmergencyResourceResolver) -> None:
        lines = resolver.resource_lines("GB", include_emergency=False)

        assert lines[0] == "Samaritans: 116 123 (24/7)"

    def test_crisis_message(self, resolver: EmergencyResourceResolver) -> None:
        message = resolver.format_crisis_message("US")

        assert message.startswith("If you're in crisis")
        assert "- Emergency: 911" in message

    def test_supported_countries(self, resolver: EmergencyResourceResolver) -> None:
        assert resolver.list_supported_countries() == ["CA", "GB", "SA", "US"]


class TestEmergencyContacts:
    """Tests for emergency contact selection."""

    @pytest.fixture
    def resolver(self) -> EmergencyResourceResolver:
        return EmergencyResourceResolver()

    def test_ranked_best_first(self, resolver: EmergencyResourceResolver) -> None:
        contacts = resolver.get_emergency_contacts("US")

        assert [c.contact_id for c in contacts] == [
            "emergency-911",
            "suicide-prevention-988",
            "crisis-text-line",
        ]

    def test_location_filter(self, resolver: EmergencyResourceResolver) -> None:
        contacts = resolver.get_emergency_contacts("uk")

        assert [c.contact_id for c in contacts] == ["crisis-text-line"]

    def test_unknown_location(self, resolver: EmergencyResourceResolver) -> None:
        assert resolver.get_emergency_contacts("Atlantis") == []

    def test_contact_serialization(self, resolver: EmergencyResourceResolver) -> None:
        contact = resolver.get_emergency_contacts("US")[1]

        data = contact.to_dict()

        assert data["primary_number"] == "988"
        assert data["coverage"]["geographic"] == ["US"]
        assert data["backup_numbers"] == ["1-800-273-8255"]


class TestConfigOverride:
    """Tests for the JSON override file."""

    def test_adds_jurisdiction(self, tmp_path: Path) -> None:
        config = tmp_path / "resources.json"
        config.write_text(json.dumps({
            "de": {
                "country_name": "Germany",
                "emergency_number": "112",
                "resources": [
                    {
                        "name": "TelefonSeelsorge",
                        "resource_type": "hotline",
                        "contact": "0800 111 0 111",
                        "languages": ["de"],
                    }
                ],
            }
        }), encoding="utf-8")

        resolver = EmergencyResourceResolver(str(config))

        resources = resolver.get_resources("DE")
        assert resources.emergency_number == "112"
        assert resources.resources[0].languages == ("de",)
        assert "US" in resolver.list_supported_countries()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            EmergencyResourceResolver(str(tmp_path / "missing.json"))

    def test_malformed_json(self, tmp_path: Path) -> None:
        config = tmp_path / "resources.json"
        config.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            EmergencyResourceResolver(str(config))

    def test_unknown_resource_field(self, tmp_path: Path) -> None:
        config = tmp_path / "resources.json"
        config.write_text(json.dumps({
            "DE": {"resources": [{"name": "x", "resource_type": "hotline", "contact": "1", "bogus": 1}]}
        }), encoding="utf-8")

        with pytest.raises(ConfigurationError):
            EmergencyResourceResolver(str(config))
