"""
Device profiles for browser emulation.

Consent banners are often laid out differently on phones (bottom
sheets, full-screen dialogs), so runs can be repeated per profile.
"""

from __future__ import annotations

from cookie_cutter.models.browser import DeviceConfig, DeviceType, ViewportSize

DEVICE_CONFIGS: dict[DeviceType, DeviceConfig] = {
    "iphone": DeviceConfig(
        user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1",
        viewport=ViewportSize(width=430, height=932),
        device_scale_factor=3,
        is_mobile=True,
        has_touch=True,
    ),
    "ipad": DeviceConfig(
        user_agent="Mozilla/5.0 (iPad; CPU OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1",
        viewport=ViewportSize(width=1024, height=1366),
        device_scale_factor=2,
        is_mobile=True,
        has_touch=True,
    ),
    "android-phone": DeviceConfig(
        user_agent="Mozilla/5.0 (Linux; Android 14; Pixel 8 Pro) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.6261.90 Mobile Safari/537.36",
        viewport=ViewportSize(width=412, height=915),
        device_scale_factor=2.625,
        is_mobile=True,
        has_touch=True,
    ),
    "windows-chrome": DeviceConfig(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
        viewport=ViewportSize(width=1280, height=800),
        device_scale_factor=1,
        is_mobile=False,
        has_touch=False,
    ),
    "macos-safari": DeviceConfig(
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
        viewport=ViewportSize(width=1440, height=900),
        device_scale_factor=2,
        is_mobile=False,
        has_touch=False,
    ),
}


def get_device_config(device_type: str) -> DeviceConfig:
    """Look up a profile; raises ``ValueError`` for unknown names."""
    if device_type not in DEVICE_CONFIGS:
        raise ValueError(f"Unknown device type {device_type!r}. Valid types: {', '.join(DEVICE_CONFIGS)}")
    return DEVICE_CONFIGS[device_type]
