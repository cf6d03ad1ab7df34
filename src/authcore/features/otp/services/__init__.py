"""OTP services."""

from .otp_engine import OTPEngine

__all__ = ["OTPEngine"]
