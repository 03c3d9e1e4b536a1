"""Tests for system — host platform detection."""

import pytest

from ametrine import system
from ametrine.models import PlatformDescriptor


@pytest.mark.parametrize("reported,expected", [
    ("Windows", "windows"),
    ("Darwin", "osx"),
    ("Linux", "linux"),
])
def test_os_name(monkeypatch, reported, expected):
    monkeypatch.setattr(system.platform, "system", lambda: reported)
    assert system.get_os_name() == expected


def test_unsupported_os(monkeypatch):
    monkeypatch.setattr(system.platform, "system", lambda: "Plan9")
    with pytest.raises(OSError):
        system.get_os_name()


@pytest.mark.parametrize("machine,expected", [
    ("AMD64", "x64"),
    ("x86_64", "x64"),
    ("i686", "x86"),
    ("aarch64", "arm64"),
    ("armv7l", "arm32"),
    ("riscv64", "x64"),
])
def test_arch_name(monkeypatch, machine, expected):
    monkeypatch.setattr(system.platform, "machine", lambda: machine)
    assert system.get_arch_name() == expected


def test_detect_platform(monkeypatch):
    monkeypatch.setattr(system.platform, "system", lambda: "Darwin")
    monkeypatch.setattr(system.platform, "machine", lambda: "arm64")
    assert system.detect_platform() == PlatformDescriptor(name="osx", architecture="arm64")
