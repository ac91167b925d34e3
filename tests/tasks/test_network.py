from dataclasses import replace

import pytest

from ultrafetch_installer.core.errors import ConnectivityError
from ultrafetch_installer.core.prompt import AutoConfirmer
from ultrafetch_installer.core.task import Severity
from ultrafetch_installer.tasks import network
from ultrafetch_installer.tasks.network import (
    ConnectivityStatus,
    check_internet,
    connectivity_task,
)


def test_first_https_probe_wins(make_host, config):
    host = make_host(commands={"curl", "ping"})
    report = check_internet(config)
    assert report.status is ConnectivityStatus.VERIFIED
    assert report.probe == f"HTTPS {config.https_probes[0]}"
    assert len(host.calls) == 1


def test_icmp_used_when_curl_missing(make_host, config):
    host = make_host(commands={"ping"})
    report = check_internet(config)
    assert report.status is ConnectivityStatus.VERIFIED
    assert report.probe == f"ICMP {config.icmp_target}"
    assert [c[0] for c in host.calls] == ["ping"]


def test_dns_only_is_ambiguous(make_host, config, monkeypatch):
    make_host(commands={"curl", "ping"}, online=False)
    monkeypatch.setattr(network, "_dns_probe", lambda host: True)
    report = check_internet(config)
    assert report.status is ConnectivityStatus.AMBIGUOUS
    assert report.ok


def test_all_probes_failing_is_unverified_not_an_error(make_host, config):
    make_host(commands={"curl", "ping"}, online=False)
    report = check_internet(config)
    assert report.status is ConnectivityStatus.UNVERIFIED
    assert not report.ok
    assert report.attempted == [
        *(f"HTTPS {url}" for url in config.https_probes),
        f"ICMP {config.icmp_target}",
        f"DNS {config.dns_probe_host}",
    ]


def test_probes_run_in_configured_order(make_host, config):
    host = make_host(commands={"curl", "ping"}, online=False)
    check_internet(config)
    assert [c[0] for c in host.calls] == ["curl"] * len(config.https_probes) + ["ping"]
    assert [c[-3] for c in host.calls[:-1]] == list(config.https_probes)


def test_task_passes_when_verified(make_host, config):
    make_host(commands={"curl"})
    confirm = AutoConfirmer(False)
    result = connectivity_task({"config": config, "confirm": confirm})
    assert result.success
    assert confirm.asked == []


def test_task_warns_but_continues_when_ambiguous(make_host, config, monkeypatch):
    make_host(online=False)
    monkeypatch.setattr(network, "_dns_probe", lambda host: True)
    result = connectivity_task({"config": config, "confirm": AutoConfirmer(False)})
    assert result.success
    assert result.messages[0][0] is Severity.WARNING


def test_task_declined_raises(make_host, config):
    make_host(online=False)
    confirm = AutoConfirmer(False)
    with pytest.raises(ConnectivityError, match="cancelled by user"):
        connectivity_task({"config": config, "confirm": confirm})
    assert confirm.asked == ["Continue anyway?"]


def test_task_accepted_proceeds(make_host, config):
    make_host(online=False)
    result = connectivity_task({"config": config, "confirm": AutoConfirmer(True)})
    assert result.success
    assert result.messages[-1] == (
        Severity.WARNING,
        "Proceeding without connectivity verification...",
    )


def test_strict_mode_never_asks(make_host, config):
    make_host(online=False)
    strict = replace(config, strict_connectivity=True)
    confirm = AutoConfirmer(True)
    with pytest.raises(ConnectivityError) as excinfo:
        connectivity_task({"config": strict, "confirm": confirm})
    assert confirm.asked == []
    assert "ICMP" in excinfo.value.hint


def test_dns_probe_handles_resolution_errors(monkeypatch):
    def broken(*args, **kwargs):
        raise OSError("Name or service not known")

    monkeypatch.setattr(network.socket, "getaddrinfo", broken)
    assert network._dns_probe("github.com") is False
