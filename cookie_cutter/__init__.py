"""Automatic acceptance of cookie/privacy consent banners on live pages."""
