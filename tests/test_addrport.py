import ipaddress
import json

import pytest

from memberkit.addrport import AddrPort, AddrPorts, parse_addr_port, parse_addr_ports


def test_parse_ipv4():
    addr_port = parse_addr_port("10.0.0.1:9000")
    assert addr_port.addr == ipaddress.ip_address("10.0.0.1")
    assert addr_port.port == 9000
    assert str(addr_port) == "10.0.0.1:9000"
    assert not addr_port.is_empty()


def test_parse_ipv6():
    addr_port = parse_addr_port("[::1]:8443")
    assert addr_port.addr == ipaddress.ip_address("::1")
    assert addr_port.port == 8443
    assert str(addr_port) == "[::1]:8443"


@pytest.mark.parametrize(
    "text",
    ["[::ffff:1.2.3.4]:80", "[fe80::1%eth0]:7000", "0.0.0.0:0", "192.168.1.20:65535"],
)
def test_round_trip_text(text):
    assert str(parse_addr_port(text)) == text


def test_empty_string_gives_empty_address():
    addr_port = parse_addr_port("")
    assert addr_port.is_empty()
    assert str(addr_port) == ""
    assert addr_port == AddrPort()


def test_unspecified_address_is_not_empty():
    assert parse_addr_port("0.0.0.0:0").is_empty() is False


def test_leading_zero_port():
    assert str(parse_addr_port("1.2.3.4:0080")) == "1.2.3.4:80"


@pytest.mark.parametrize(
    "text",
    [
        "1.2.3.4",
        "1.2.3.4:",
        "1.2.3.4:65536",
        "1.2.3.4:-1",
        "1.2.3.4:+1",
        "::1:80",
        "[1.2.3.4]:80",
        "[::1:80",
        "host:80",
        "01.2.3.4:80",
    ],
)
def test_parse_errors(text):
    with pytest.raises(ValueError):
        parse_addr_port(text)


def test_port_out_of_range_rejected():
    with pytest.raises(ValueError):
        AddrPort(ipaddress.ip_address("1.2.3.4"), 70000)


def test_json_round_trip():
    addr_port = parse_addr_port("10.0.0.1:9000")
    assert json.loads(addr_port.to_json()) == "10.0.0.1:9000"
    assert AddrPort.from_json(addr_port.to_json()) == addr_port


def test_json_null_is_empty():
    assert AddrPort.from_json("null").is_empty()
    assert json.loads(AddrPort().to_json()) == ""


def test_json_non_string_rejected():
    with pytest.raises(ValueError):
        AddrPort.from_json("5")


def test_parse_addr_ports():
    texts = ["10.0.0.1:1", "[::1]:2", ""]
    addr_ports = parse_addr_ports(texts)
    assert isinstance(addr_ports, AddrPorts)
    assert addr_ports.strings() == texts


def test_parse_addr_ports_error():
    with pytest.raises(ValueError):
        parse_addr_ports(["10.0.0.1:1", "bad"])


def test_parse_addr_ports_empty():
    assert parse_addr_ports([]).strings() == []


def test_select_random_member():
    addr_ports = parse_addr_ports(["10.0.0.1:1", "10.0.0.2:2", "10.0.0.3:3"])
    for _ in range(20):
        assert addr_ports.select_random() in addr_ports


def test_select_random_empty():
    with pytest.raises(IndexError):
        AddrPorts().select_random()