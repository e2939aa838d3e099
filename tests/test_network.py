# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the cross-platform network utilities.
"""

import pytest
import requests

from sysspector.utils.system import network
from sysspector.utils.system.models import LatencyTarget
from sysspector.utils.system.network import (
    TrafficSample,
    band_for_channel,
    build_ping_command,
    compute_traffic_rate,
    fetch_country_code,
    fetch_public_ip,
    measure_traffic_rate,
    parse_hosts_file,
    parse_mtr_report,
    parse_ping_summary,
    parse_resolv_conf,
    probe_targets,
    read_hosts_file,
    summarize_latency,
)


class FakeResponse:
    def __init__(self, text="", payload=None, status_code=200):
        self.text = text
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


def test_traffic_rate_from_two_samples():
    """10240 bytes in and 5120 bytes out over one second is 15 KB/s."""
    first = TrafficSample(bytes_recv=0, bytes_sent=0, timestamp=100.0)
    second = TrafficSample(bytes_recv=10240, bytes_sent=5120, timestamp=101.0)

    assert compute_traffic_rate(first, second) == 15.0


def test_measure_traffic_rate_formats_kb_per_second():
    samples = iter(
        [
            TrafficSample(bytes_recv=1000, bytes_sent=2000, timestamp=50.0),
            TrafficSample(bytes_recv=11240, bytes_sent=7120, timestamp=51.0),
        ]
    )
    sleeps = []

    rate = measure_traffic_rate(lambda: next(samples), interval=1.0, sleep=sleeps.append)

    assert rate == "15.00 KB/s"
    assert sleeps == [1.0]


def test_measure_traffic_rate_without_counters():
    sleeps = []

    assert measure_traffic_rate(lambda: None, sleep=sleeps.append) == ""
    assert sleeps == []


def test_traffic_rate_of_unordered_samples_is_zero():
    sample = TrafficSample(bytes_recv=10, bytes_sent=10, timestamp=10.0)

    assert compute_traffic_rate(sample, sample) == 0.0


@pytest.mark.parametrize("channel, band", [(0, ""), (1, "2.4GHz"), (14, "2.4GHz"), (36, "5GHz"), (149, "5GHz")])
def test_band_for_channel(channel, band):
    assert band_for_channel(channel) == band


def test_parse_macos_ping_summary(fixture_text):
    stats = parse_ping_summary(fixture_text("ping_macos.txt"))

    assert stats == {
        "min": 10.123,
        "avg": 12.456,
        "max": 15.789,
        "stddev": 1.234,
        "jitter": 1.234,
        "packet_loss": 20.0,
    }


def test_parse_windows_ping_summary(fixture_text):
    """Windows ping has no deviation figure, jitter is the max-min spread."""
    stats = parse_ping_summary(fixture_text("ping_windows.txt"))

    assert stats["min"] == 10.0
    assert stats["avg"] == 15.0
    assert stats["max"] == 20.0
    assert stats["jitter"] == 10.0
    assert stats["packet_loss"] == 0.0


def test_parse_ping_summary_of_unreachable_host():
    output = "--- 10.255.255.1 ping statistics ---\n5 packets transmitted, 0 packets received, 100.0% packet loss\n"

    stats = parse_ping_summary(output)

    assert stats["packet_loss"] == 100.0
    assert stats["avg"] == 0.0


def test_parse_ping_summary_without_statistics():
    assert parse_ping_summary("ping: cannot resolve example.invalid: Unknown host") is None
    assert parse_ping_summary("") is None


def test_build_ping_command():
    assert build_ping_command("8.8.8.8", 5, "Darwin") == ["ping", "-c", "5", "-q", "8.8.8.8"]
    assert build_ping_command("8.8.8.8", 4, "Windows") == ["ping", "-n", "4", "8.8.8.8"]


def test_probe_targets(fake_executor, fixture_text):
    # ping exits 2 on packet loss but its summary is still used
    fake_executor.add(["ping", "-c", "5", "-q", "8.8.8.8"], stdout=fixture_text("ping_macos.txt"), returncode=2)
    targets = [{"name": "Google DNS", "host": "8.8.8.8"}, {"name": "Nowhere", "host": "example.invalid"}, {"name": "Empty"}]

    results = probe_targets(targets, count=5, system="Darwin")

    assert len(results) == 1
    assert results[0].name == "Google DNS"
    assert results[0].avg == 12.456
    assert results[0].packet_loss == 20.0


def test_summarize_latency_ignores_silent_targets():
    targets = [
        LatencyTarget(name="a", avg=10.0, jitter=1.0, packet_loss=0.0),
        LatencyTarget(name="b", avg=20.0, jitter=3.0, packet_loss=20.0),
        LatencyTarget(name="c", avg=0.0, jitter=0.0, packet_loss=100.0),
    ]

    info = summarize_latency(targets)

    assert info.avg_latency == 15.0
    assert info.jitter == 2.0
    assert info.packet_loss == 10.0
    assert len(info.targets) == 3


def test_summarize_latency_when_no_target_answers():
    info = summarize_latency([LatencyTarget(name="a", packet_loss=100.0), LatencyTarget(name="b", packet_loss=100.0)])

    assert info.avg_latency == 0.0
    assert info.jitter == 0.0
    assert info.packet_loss == 100.0


def test_summarize_latency_without_targets():
    info = summarize_latency([])

    assert info.avg_latency == 0.0
    assert info.targets == []


def test_parse_mtr_report(fixture_text):
    hops = parse_mtr_report(fixture_text("mtr_report.txt"))

    assert [hop.hop for hop in hops] == [1, 2, 3, 4]
    assert hops[1].host == "10.0.0.1"
    assert hops[1].loss == 20.0
    assert hops[1].sent == 5
    assert hops[1].avg == 9.1
    assert hops[1].worst == 11.2
    assert hops[2].host == "???"
    assert hops[3].stddev == 0.7


def test_parse_hosts_file(fixture_text):
    entries = parse_hosts_file(fixture_text("hosts.txt"))

    assert [(e.ip, e.hostname) for e in entries] == [
        ("127.0.0.1", "localhost"),
        ("255.255.255.255", "broadcasthost"),
        ("::1", "localhost"),
        ("::1", "ip6-localhost"),
        ("192.168.1.10", "nas.local"),
    ]


def test_read_missing_hosts_file(tmp_path):
    assert read_hosts_file(str(tmp_path / "hosts")) == []


def test_parse_resolv_conf():
    text = "# generated\nnameserver 1.1.1.1\nnameserver 9.9.9.9\nsearch corp.example.com example.com\n"

    assert parse_resolv_conf(text) == {
        "servers": ["1.1.1.1", "9.9.9.9"],
        "search_domains": ["corp.example.com", "example.com"],
    }


def test_fetch_public_ip_tries_services_in_order(monkeypatch):
    responses = {
        "https://down.example": requests.ConnectionError("connection refused"),
        "https://html.example": FakeResponse(text="<html>blocked</html>"),
        "https://json.example": FakeResponse(text='{"ip": "203.0.113.7"}', payload={"ip": "203.0.113.7"}),
    }
    requested = []

    def fake_get(url, timeout):
        requested.append(url)
        response = responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(network.requests, "get", fake_get)

    public_ip = fetch_public_ip(["https://down.example", "https://html.example", "https://json.example"], timeout=1)

    assert public_ip == "203.0.113.7"
    assert requested == ["https://down.example", "https://html.example", "https://json.example"]


def test_fetch_public_ip_accepts_plain_text(monkeypatch):
    monkeypatch.setattr(network.requests, "get", lambda url, timeout: FakeResponse(text="198.51.100.4\n"))

    assert fetch_public_ip(["https://plain.example"]) == "198.51.100.4"


def test_fetch_public_ip_when_offline(monkeypatch):
    def offline(url, timeout):
        raise requests.ConnectionError("network unreachable")

    monkeypatch.setattr(network.requests, "get", offline)

    assert fetch_public_ip(["https://a.example", "https://b.example"]) == ""
    assert fetch_country_code("http://geo.example/json/") == ""


def test_fetch_country_code(monkeypatch):
    monkeypatch.setattr(
        network.requests, "get", lambda url, timeout: FakeResponse(payload={"status": "success", "countryCode": "DE"})
    )

    assert fetch_country_code("http://geo.example/json/") == "DE"
    assert fetch_country_code("") == ""
