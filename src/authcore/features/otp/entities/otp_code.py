"""One-time code entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class OTPCode:
    """A generated TOTP code ready for delivery.

    ``time_step`` is the RFC 6238 counter the code was derived from and
    ``valid_until`` the epoch second at which that step ends.
    """

    code: str
    uri: str
    time_step: int
    valid_until: int

    def __repr__(self) -> str:
        return f"OTPCode(time_step={self.time_step}, valid_until={self.valid_until})"
