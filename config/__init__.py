"""Configuration package utilities."""

__all__ = ["ConfigController", "load_filter_settings"]


def __getattr__(name: str):
    if name == "ConfigController":
        from config.controller import ConfigController

        return ConfigController
    if name == "load_filter_settings":
        from vision.settings import load_filter_settings

        return load_filter_settings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
