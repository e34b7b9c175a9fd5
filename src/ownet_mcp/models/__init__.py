"""Data models for devices on the 1-Wire bus."""

from .device import Device
