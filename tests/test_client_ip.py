import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from landing_ab.geo.client_ip import LOOPBACK, extract_client_ip


def test_cdn_header_wins_over_forwarded_for() -> None:
    headers = {"CF-Connecting-IP": "81.2.69.160", "X-Forwarded-For": "8.8.8.8"}
    assert extract_client_ip(headers, "10.0.0.1") == "81.2.69.160"


def test_forwarded_for_uses_left_most_entry() -> None:
    headers = {"X-Forwarded-For": " 203.0.113.7 , 10.0.0.2, 10.0.0.3"}
    assert extract_client_ip(headers) == "203.0.113.7"


def test_invalid_candidates_are_skipped() -> None:
    headers = {"X-Real-IP": "unknown", "X-Forwarded-For": "198.51.100.4"}
    assert extract_client_ip(headers) == "198.51.100.4"


def test_header_names_are_case_insensitive() -> None:
    assert extract_client_ip({"X-REAL-IP": "192.0.2.9"}) == "192.0.2.9"


def test_ipv6_is_accepted() -> None:
    assert extract_client_ip({"x-real-ip": "2001:db8::1"}) == "2001:db8::1"


def test_structured_forwarded_header_is_not_parsed() -> None:
    headers = {"Forwarded": "for=192.0.2.60;proto=http"}
    assert extract_client_ip(headers, "198.51.100.20") == "198.51.100.20"


def test_peer_address_is_last_resort() -> None:
    assert extract_client_ip({}, "198.51.100.20") == "198.51.100.20"


def test_falls_back_to_loopback() -> None:
    assert extract_client_ip({"X-Forwarded-For": "garbage"}, "not-an-ip") == LOOPBACK
    assert extract_client_ip({}) == "127.0.0.1"
