"""OTP entities."""

from .otp_code import OTPCode

__all__ = ["OTPCode"]
