"""Shared test helpers."""
import socket

from ..collectors.system_models import Sample


def make_sample(timestamp, cpu=10.0, memory=20.0, disk=30.0,
                network_upload=100.0, network_download=200.0, temperature=40.0):
    return Sample(
        timestamp=timestamp,
        cpu=cpu,
        memory=memory,
        disk=disk,
        network_upload=network_upload,
        network_download=network_download,
        temperature=temperature,
    )


class FixedClock:
    """Clock returning a settable time in ms."""

    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


def unused_port():
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
