"""结果上报测试 - 时间换算 / 载荷结构 / 失败处理"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import FakeClock

from pkgservice.core.environment import HostCollector
from pkgservice.core.exceptions import (
    BackendError,
    EnvironmentDetectionError,
    ReportSubmissionError,
)
from pkgservice.core.models import HostEnvironment, PackageResult, ResultStep
from pkgservice.core.reporter import ResultReporter, build_payload, elapsed_millis
from pkgservice.core.trace import Tracer

START = 1_000_000_000


def _result(**overrides: object) -> PackageResult:
    data: dict = {
        "package_name": "agent",
        "version": "1.2.0",
        "operation": "Install",
        "exitcode": 0,
        "timing": START,
        "steps": [ResultStep(operation="download", exitcode=0, timing=1_002_000_000)],
    }
    data.update(overrides)
    return PackageResult(**data)


def _collector(env: HostEnvironment | None = None) -> MagicMock:
    c = MagicMock()
    c.collect.return_value = env or HostEnvironment(
        platform="linux", platform_version="5.0", architecture="x86_64",
        instance_id="i-123", instance_type="m5.large",
        region="us-east-1", availability_zone="us-east-1a",
    )
    return c


class TestElapsedMillis:
    @pytest.mark.parametrize(("ts", "expected"), [
        (START, 0),
        (START + 2_000_000, 2),
        (START + 2_999_999, 2),
        (START - 3_000_000, -3),
        (START - 1, 0),
    ])
    def test_relative_to_start(self, ts: int, expected: int) -> None:
        assert elapsed_millis(ts, START) == expected


class TestBuildPayload:
    def test_fields(self) -> None:
        payload = build_payload(_result(), HostEnvironment(platform="linux"), START + 5_000_000)
        assert payload["PackageName"] == "agent"
        assert payload["PackageVersion"] == "1.2.0"
        assert payload["Operation"] == "Install"
        assert payload["OverallTiming"] == 5
        assert payload["Result"] == 0
        assert payload["Steps"] == [{"Action": "download", "Result": 0, "Timing": 2}]
        assert payload["Attributes"]["platformName"] == "linux"
        assert "PreviousPackageVersion" not in payload

    def test_previous_version_included_when_set(self) -> None:
        payload = build_payload(_result(previous_version="1.1.0"), HostEnvironment(), START)
        assert payload["PreviousPackageVersion"] == "1.1.0"

    def test_step_order_preserved(self) -> None:
        steps = [
            ResultStep("b", 0, START + 9_000_000),
            ResultStep("a", 1, START + 1_000_000),
        ]
        payload = build_payload(_result(steps=steps), HostEnvironment(), START)
        assert [s["Action"] for s in payload["Steps"]] == ["b", "a"]
        assert payload["Steps"][1]["Result"] == 1


class TestResultReporter:
    def test_report_submits_payload(self) -> None:
        transport = MagicMock()
        reporter = ResultReporter(transport, _collector(), FakeClock(START + 10_000_000))

        reporter.report(Tracer(), _result())

        payload = transport.put_package_result.call_args[0][0]
        assert payload["Steps"][0]["Timing"] == 2
        assert payload["OverallTiming"] == 10
        assert payload["Attributes"] == {
            "platformName": "linux",
            "platformVersion": "5.0",
            "architecture": "x86_64",
            "instanceID": "i-123",
            "instanceType": "m5.large",
            "region": "us-east-1",
            "availabilityZone": "us-east-1a",
        }

    def test_environment_failure_is_not_fatal(self) -> None:
        transport = MagicMock()
        collector = MagicMock()
        collector.collect.side_effect = EnvironmentDetectionError("no os-release")
        ResultReporter(transport, collector, FakeClock(START)).report(None, _result())

        payload = transport.put_package_result.call_args[0][0]
        assert set(payload["Attributes"].values()) == {""}
        assert len(payload["Attributes"]) == 7

    def test_submission_failure_wrapped(self) -> None:
        transport = MagicMock()
        cause = BackendError("HTTP 错误 500")
        transport.put_package_result.side_effect = cause
        reporter = ResultReporter(transport, _collector(), FakeClock(START))

        with pytest.raises(ReportSubmissionError, match="agent@1.2.0") as exc_info:
            reporter.report(Tracer(), _result())
        assert exc_info.value.__cause__ is cause

    def test_unexpected_collector_error_is_not_fatal(self, tmp_path: Path) -> None:
        release = tmp_path / "os-release"
        release.write_bytes(b"ID=\xff\xfe\n")
        transport = MagicMock()
        with patch("pkgservice.core.environment.platform.system", return_value="Linux"):
            collector = HostCollector(os_release=release)
            ResultReporter(transport, collector, FakeClock(START)).report(None, _result())

        transport.put_package_result.assert_called_once()
        payload = transport.put_package_result.call_args[0][0]
        assert payload["Attributes"]["platformName"] == ""

    def test_non_service_collector_error_is_not_fatal(self) -> None:
        transport = MagicMock()
        collector = MagicMock()
        collector.collect.side_effect = KeyError("region")
        ResultReporter(transport, collector, FakeClock(START)).report(None, _result())
        transport.put_package_result.assert_called_once()

    def test_unexpected_transport_error_wrapped(self) -> None:
        transport = MagicMock()
        cause = RuntimeError("serializer exploded")
        transport.put_package_result.side_effect = cause
        reporter = ResultReporter(transport, _collector(), FakeClock(START))

        with pytest.raises(ReportSubmissionError, match="serializer exploded") as exc_info:
            reporter.report(Tracer(), _result())
        assert exc_info.value.__cause__ is cause
