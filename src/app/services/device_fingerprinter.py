"""
Device/Context Fingerprinter

Derives display metadata for a session from the raw request context.
Every field is advisory: user agents are client-supplied and must never be
used for authorization decisions.
"""

import ipaddress
from typing import Optional

from pydantic import BaseModel, ConfigDict
from user_agents import parse

from src.domain.entities import DeviceType

UNKNOWN = "Unknown"

# ua-parser reports unrecognised families as "Other"
_UNRECOGNISED = {"", "Other"}


class DeviceFingerprint(BaseModel):
    model_config = ConfigDict(frozen=True)

    device_name: str
    device_type: str
    browser: str
    os: str
    ip_address: str


def _family_with_version(family: Optional[str], version: Optional[str]) -> str:
    if not family or family in _UNRECOGNISED:
        return UNKNOWN
    return f"{family} {version or ''}".strip()


def _device_name(user_agent) -> str:
    parts = []
    brand = user_agent.device.brand
    model = user_agent.device.model
    if brand and brand not in _UNRECOGNISED:
        parts.append(brand)
    if model and model not in _UNRECOGNISED and model != brand:
        parts.append(model)
    if not parts and user_agent.os.family not in _UNRECOGNISED:
        parts.append(user_agent.os.family)
    return " ".join(parts) if parts else UNKNOWN


def _device_type(user_agent) -> DeviceType:
    if user_agent.is_bot:
        return DeviceType.bot
    if user_agent.is_tablet:
        return DeviceType.tablet
    if user_agent.is_mobile:
        return DeviceType.mobile
    if user_agent.is_pc:
        return DeviceType.desktop
    return DeviceType.unknown


def _normalize_ip(remote_address: Optional[str]) -> str:
    if not remote_address:
        return UNKNOWN
    try:
        return str(ipaddress.ip_address(remote_address.strip()))
    except ValueError:
        return UNKNOWN


def fingerprint(
    user_agent: Optional[str], remote_address: Optional[str]
) -> DeviceFingerprint:
    """
    Derive device name, device type, browser, OS and IP from request metadata.

    Pure function: the same input always yields the same fingerprint.
    Missing or unparseable values resolve to "Unknown" rather than None.

    Args:
        user_agent: Raw User-Agent header value
        remote_address: Client address as seen by the login flow

    Returns:
        DeviceFingerprint with every field populated
    """
    ip_address = _normalize_ip(remote_address)

    if not user_agent or not user_agent.strip():
        return DeviceFingerprint(
            device_name=UNKNOWN,
            device_type=DeviceType.unknown.value,
            browser=UNKNOWN,
            os=UNKNOWN,
            ip_address=ip_address,
        )

    parsed = parse(user_agent)
    return DeviceFingerprint(
        device_name=_device_name(parsed),
        device_type=_device_type(parsed).value,
        browser=_family_with_version(parsed.browser.family, parsed.browser.version_string),
        os=_family_with_version(parsed.os.family, parsed.os.version_string),
        ip_address=ip_address,
    )
