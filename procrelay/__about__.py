"""Metadata package for procrelay."""

from __future__ import annotations

__title__ = "procrelay"
__package_name__ = "procrelay"
__version__ = "0.4.0"
__description__ = "Run external commands, relay their output line by line"
__author__ = "procrelay contributors"
__license__ = "MIT"
__copyright__ = "Copyright 2022- procrelay contributors"
