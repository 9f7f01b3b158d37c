"""Runnable examples for the CTRV unscented Kalman filter."""

__all__ = []
