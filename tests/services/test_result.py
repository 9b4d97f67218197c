"""Tests for ServiceResult, ServiceError and the error hierarchy."""

import json

import pytest

from mdns_responder.errors import (
    AdapterError,
    AdapterErrorKind,
    ConfigError,
    ConfigErrorKind,
    ExitCode,
    RegistrationError,
    RegistrationErrorKind,
    ResponderError,
    ServiceControlError,
    ServiceControlErrorKind,
)
from mdns_responder.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="run", data={"port": 445})
        assert result.ok is True
        assert result.data == {"port": 445}
        assert result.warnings == []
        assert result.error is None

    def test_error_defaults_to_generic_exit_code(self) -> None:
        assert ServiceError(code="E", message="m").exit_code == 1

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=False, op="run", error=ServiceError(code="X", message="y"))
        parsed = json.loads(result.model_dump_json())
        assert parsed["error"]["code"] == "X"
        assert parsed["error"]["exit_code"] == 1

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="run")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]


class TestErrorHierarchy:
    @pytest.mark.parametrize(
        ("error", "code", "exit_code"),
        [
            (ConfigError(ConfigErrorKind.INVALID, "bad"), "CONFIG_INVALID", ExitCode.CONFIG),
            (
                AdapterError(AdapterErrorKind.NO_SUITABLE_ADAPTER, "none"),
                "ADAPTER_NO_SUITABLE_ADAPTER",
                ExitCode.ADAPTER,
            ),
            (
                RegistrationError(RegistrationErrorKind.TXT_TOO_LARGE, "big"),
                "REGISTRATION_TXT_TOO_LARGE",
                ExitCode.REGISTRATION,
            ),
            (
                ServiceControlError(ServiceControlErrorKind.PERMISSION_DENIED, "root"),
                "SERVICE_CONTROL_PERMISSION_DENIED",
                ExitCode.SERVICE_CONTROL,
            ),
        ],
    )
    def test_codes(self, error: ResponderError, code: str, exit_code: ExitCode) -> None:
        assert error.code == code
        assert error.exit_code == exit_code
        service_error = error.to_service_error()
        assert service_error.code == code
        assert service_error.exit_code == int(exit_code)

    def test_detail_stringified(self) -> None:
        err = RegistrationError(
            RegistrationErrorKind.BACKEND, "failed", cause=OSError("boom"), port=445
        )
        assert err.to_service_error().detail == {"cause": "OSError: boom", "port": "445"}

    def test_none_detail_dropped(self) -> None:
        err = ConfigError(ConfigErrorKind.NOT_FOUND, "missing", field=None, path=None)
        assert err.detail == {}
