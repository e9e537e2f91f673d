"""
Tests unitaires pour LOT 2: Logging - Structured Logger

Règles vérifiées:
- Format JSON structuré, une entrée par événement
- Champs obligatoires: timestamp, level, correlation_id, message
- Timestamp ISO 8601 UTC avec millisecondes
- Filtrage par niveau minimal
- Jetons et mots de passe jamais en clair
"""

import json
import re

import pytest

from src.logging import (
    ContextualLogger,
    InvalidLogLevelError,
    IStructuredLogger,
    LogConfig,
    LogLevel,
    MissingRequiredFieldError,
    StructuredLogger,
    parse_log_level,
)


class TestJsonFormat:
    """Format JSON structuré."""

    def test_output_is_valid_json(self) -> None:
        """Chaque entrée se sérialise en objet JSON."""
        logger = StructuredLogger("session")

        entry = logger.info("Login succeeded")
        assert entry is not None

        parsed = json.loads(entry.to_json())
        assert parsed["message"] == "Login succeeded"
        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "session"

    def test_output_handler_receives_json(self) -> None:
        """L'output handler reçoit la ligne JSON."""
        outputs = []
        logger = StructuredLogger("gateway", output_handler=outputs.append)

        logger.warn("Credential rejected", path="/units/")

        assert len(outputs) == 1
        parsed = json.loads(outputs[0])
        assert parsed["extra"]["path"] == "/units/"

    def test_unicode_preserved(self) -> None:
        """Les accents restent lisibles dans le JSON."""
        logger = StructuredLogger("session")

        entry = logger.info("Sesión restaurada")
        assert entry is not None
        assert "Sesión" in entry.to_json()

    def test_condominium_only_when_set(self) -> None:
        """condominium_id n'apparaît que s'il est connu."""
        logger = StructuredLogger("session")

        anonymous = logger.info("Logged out")
        assert anonymous is not None
        assert "condominium_id" not in anonymous.to_dict()

        logger.set_default_condominium("12")
        scoped = logger.info("Login succeeded")
        assert scoped is not None
        assert scoped.to_dict()["condominium_id"] == "12"

    def test_empty_extra_omitted(self) -> None:
        logger = StructuredLogger("session")

        entry = logger.info("Renewal started")
        assert entry is not None
        assert "extra" not in entry.to_dict()


class TestRequiredFields:
    """Champs obligatoires."""

    def test_correlation_id_generated(self) -> None:
        """Sans correlation_id fourni, un UUID est généré."""
        logger = StructuredLogger("session")

        entry = logger.info("Test")
        assert entry is not None
        assert re.match(r"^[0-9a-f-]{36}$", entry.correlation_id)

    def test_explicit_correlation_id(self) -> None:
        logger = StructuredLogger("session")

        entry = logger.log(LogLevel.INFO, "Test", correlation_id="corr-1")
        assert entry is not None
        assert entry.correlation_id == "corr-1"

    def test_default_correlation_id(self) -> None:
        logger = StructuredLogger("session")
        logger.set_default_correlation("corr-default")

        entry = logger.info("Test")
        assert entry is not None
        assert entry.correlation_id == "corr-default"

    def test_message_required(self) -> None:
        """Message vide refusé."""
        logger = StructuredLogger("session")

        with pytest.raises(MissingRequiredFieldError) as exc:
            logger.info("")
        assert exc.value.field_name == "message"

    def test_clear_defaults(self) -> None:
        logger = StructuredLogger("session")
        logger.set_default_condominium("12")
        logger.set_default_correlation("corr")

        logger.clear_defaults()
        entry = logger.info("Test")

        assert entry is not None
        assert entry.condominium_id is None
        assert entry.correlation_id != "corr"

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            StructuredLogger("  ")


class TestTimestamp:
    """Timestamp ISO 8601 UTC."""

    def test_timestamp_format(self) -> None:
        """Format 2024-12-04T14:30:00.123Z."""
        logger = StructuredLogger("session")

        entry = logger.info("Test")
        assert entry is not None
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", entry.timestamp)


class TestLevels:
    """Niveaux et filtrage."""

    @pytest.mark.parametrize(
        "method,level",
        [
            ("debug", LogLevel.DEBUG),
            ("info", LogLevel.INFO),
            ("warn", LogLevel.WARN),
            ("error", LogLevel.ERROR),
            ("critical", LogLevel.CRITICAL),
        ],
    )
    def test_level_methods(self, method: str, level: LogLevel) -> None:
        logger = StructuredLogger("session", config=LogConfig(min_level=LogLevel.DEBUG))

        entry = getattr(logger, method)("Test")

        assert entry is not None
        assert entry.level == level

    def test_below_min_level_filtered(self) -> None:
        """DEBUG filtré avec min_level=INFO (défaut)."""
        logger = StructuredLogger("session")

        assert logger.debug("Session transition") is None
        assert logger.get_entries() == []

    def test_filtered_entry_not_validated(self) -> None:
        """Une entrée filtrée ne lève pas d'erreur de champ."""
        logger = StructuredLogger("session", config=LogConfig(min_level=LogLevel.ERROR))

        assert logger.info("") is None

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("debug", LogLevel.DEBUG),
            ("INFO", LogLevel.INFO),
            ("Warning", LogLevel.WARN),
            ("warn", LogLevel.WARN),
            (" error ", LogLevel.ERROR),
        ],
    )
    def test_parse_log_level(self, name: str, expected: LogLevel) -> None:
        assert parse_log_level(name) == expected

    def test_parse_unknown_level(self) -> None:
        with pytest.raises(InvalidLogLevelError) as exc:
            parse_log_level("VERBOSE")
        assert exc.value.level == "VERBOSE"


class TestSensitiveData:
    """Jetons et mots de passe masqués."""

    def test_tokens_masked_in_extra(self) -> None:
        logger = StructuredLogger("identity-api")

        entry = logger.info(
            "Login response",
            access="eyJ.access",
            refresh="eyJ.refresh",
            username="admin",
        )
        assert entry is not None

        serialized = entry.to_json()
        assert "eyJ.access" not in serialized
        assert "eyJ.refresh" not in serialized
        assert entry.extra["username"] == "admin"

    def test_authorization_header_masked(self) -> None:
        logger = StructuredLogger("gateway")

        entry = logger.info("Outgoing", headers={"Authorization": "Bearer abc"}, note="Bearer xyz")
        assert entry is not None
        assert entry.extra["headers"]["Authorization"] == "***MASKED***"
        assert entry.extra["note"] == "Bearer ***MASKED***"

    def test_masking_can_be_disabled(self) -> None:
        logger = StructuredLogger("session", config=LogConfig(mask_sensitive=False))

        entry = logger.info("Test", password="plain")
        assert entry is not None
        assert entry.extra["password"] == "plain"

    def test_extra_can_be_excluded(self) -> None:
        logger = StructuredLogger("session", config=LogConfig(include_extra=False))

        entry = logger.info("Test", username="admin")
        assert entry is not None
        assert entry.extra == {}


class TestEntryBuffer:
    """Tampon d'inspection."""

    def test_buffer_bounded(self) -> None:
        logger = StructuredLogger("session", config=LogConfig(max_entries=3))

        for i in range(5):
            logger.info(f"Event {i}")

        messages = [e.message for e in logger.get_entries()]
        assert messages == ["Event 2", "Event 3", "Event 4"]

    def test_filters(self) -> None:
        logger = StructuredLogger("session")
        logger.info("Renewal started")
        logger.warn("Session dead", reason="renewal failed")
        logger.info("Renewal started")

        assert len(logger.get_entries_by_message("Renewal started")) == 2
        assert len(logger.get_entries_by_level(LogLevel.WARN)) == 1

        logger.clear_entries()
        assert logger.get_entries() == []

    def test_implements_interface(self) -> None:
        assert isinstance(StructuredLogger("session"), IStructuredLogger)


class TestContextualLogger:
    """Logger avec contexte de requête."""

    def test_context_shared_by_entries(self) -> None:
        logger = StructuredLogger("gateway")
        logger.set_default_condominium("12")

        ctx = logger.with_context()
        first = ctx.info("Credential rejected")
        second = ctx.warn("Credential rejected after renewal")

        assert isinstance(ctx, ContextualLogger)
        assert first is not None and second is not None
        assert first.correlation_id == second.correlation_id == ctx.correlation_id
        assert first.condominium_id == "12"

    def test_explicit_context(self) -> None:
        logger = StructuredLogger("gateway")

        ctx = logger.with_context(correlation_id="req-1", condominium_id="7")
        entry = ctx.error("Request transport failure")

        assert entry is not None
        assert entry.correlation_id == "req-1"
        assert entry.condominium_id == "7"

    def test_shortcuts_require_log(self) -> None:
        """Les raccourcis de niveau n'existent que sur un logger qui définit log()."""
        from src.logging.structured_logger import _LevelShortcuts

        class Incomplete(_LevelShortcuts):
            pass

        with pytest.raises(TypeError):
            Incomplete()
