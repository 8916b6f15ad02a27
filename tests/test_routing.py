import subprocess
from collections import namedtuple

from pingsweep import routing

Stats = namedtuple("Stats", ["isup"])

IP_ROUTE_OUTPUT = (
    "default via 172.17.0.1 dev docker0 proto static\n"
    "default via 192.168.1.1 dev eth0 proto dhcp metric 100\n"
)


class Completed:
    def __init__(self, stdout):
        self.stdout = stdout


def no_netifaces_gateway(monkeypatch):
    monkeypatch.setattr(routing.netifaces, "gateways", lambda: {"default": {}})


def test_netifaces_gateway_preferred(monkeypatch):
    monkeypatch.setattr(routing.netifaces, "gateways",
                        lambda: {"default": {routing.netifaces.AF_INET: ("10.0.0.1", "eth0")}})
    assert routing.get_default_gateway() == "10.0.0.1"


def test_routing_table_fallback_prefers_physical_interface(monkeypatch):
    no_netifaces_gateway(monkeypatch)
    monkeypatch.setattr(routing.platform, "system", lambda: "Linux")
    monkeypatch.setattr(routing.subprocess, "run", lambda *a, **kw: Completed(IP_ROUTE_OUTPUT))
    monkeypatch.setattr(routing.psutil, "net_if_stats", lambda: {"docker0": Stats(True), "eth0": Stats(True)})
    assert routing.get_default_gateway() == "192.168.1.1"


def test_windows_route_print(monkeypatch):
    no_netifaces_gateway(monkeypatch)
    monkeypatch.setattr(routing.platform, "system", lambda: "Windows")
    output = "          0.0.0.0          0.0.0.0      10.20.30.1     10.20.30.44     25\n"
    monkeypatch.setattr(routing.subprocess, "run", lambda *a, **kw: Completed(output))
    assert routing.get_default_gateway() == "10.20.30.1"


def test_no_routing_table(monkeypatch):
    no_netifaces_gateway(monkeypatch)

    def fail(*args, **kwargs):
        raise subprocess.CalledProcessError(1, args[0])

    monkeypatch.setattr(routing.subprocess, "run", fail)
    assert routing.get_default_gateway() is None


def test_score_interface(monkeypatch):
    monkeypatch.setattr(routing.psutil, "net_if_stats",
                        lambda: {"eth0": Stats(True), "vboxnet0": Stats(True), "wlan0": Stats(False)})
    assert routing.score_interface("eth0") > routing.score_interface("vboxnet0")
    assert routing.score_interface("wlan0") == -1
    assert routing.score_interface("gone0") == -1
