"""Typed configuration properties for pymint."""

from pymint.config.properties import CircuitBreakerProperties, ClientProperties, RetryProperties

__all__ = ["CircuitBreakerProperties", "ClientProperties", "RetryProperties"]
