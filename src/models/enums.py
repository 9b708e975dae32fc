"""Enums for model fields."""

from enum import Enum


class Difficulty(str, Enum):
    """How hard a recipe is to cook."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class DevicePlatform(str, Enum):
    """Platforms a device token can be registered for."""

    IOS = "ios"
    ANDROID = "android"
