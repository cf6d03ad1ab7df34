"""OTP feature module - RFC 6238 second factor.

Usage Example:
```python
engine = OTPEngine.from_settings(store, get_settings())
secret = engine.rotate_secret()
otp = await engine.request_code("alice", secret)
await engine.verify("alice", otp.code, secret)
```
"""

from .entities.otp_code import OTPCode
from .services.otp_engine import OTPEngine

__all__ = [
    "OTPCode",
    "OTPEngine",
]
