"""Object storage permission checks."""

from .s3_access import (
    ProbeResult,
    S3SecurityProbe,
    SecurityReport,
    check_bucket_security,
)

__all__ = [
    "ProbeResult",
    "S3SecurityProbe",
    "SecurityReport",
    "check_bucket_security",
]
