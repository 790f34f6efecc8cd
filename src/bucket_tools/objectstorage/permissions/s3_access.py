"""Bucket security probes.

Checks that the configured bucket is private: each probe attempts an
operation without valid credentials and passes only when the store denies it.

Probes:
    1. List objects without credentials
    2. Upload an object without credentials
    3. Download an object without credentials
    4. Delete an object without credentials
    5. List objects with invalid credentials
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from bucket_tools.core import get_logger
from bucket_tools.objectstorage.clients import S3ClientConfig

logger = get_logger(__name__)

DEFAULT_PROBE_KEY = "security_test/unauthorized_upload.txt"
INVALID_ACCESS_KEY = "AKIAINVALIDINVALID00"
INVALID_SECRET_KEY = "invalid/secret/key/for/bucket/tools/probe00"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one security probe."""

    number: int
    name: str
    passed: bool
    message: str


@dataclass
class SecurityReport:
    """Outcome of all probes against one bucket."""

    bucket: str
    results: list[ProbeResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for result in self.results if result.passed)

    @property
    def success_rate(self) -> float:
        if not self.results:
            return 0.0
        return round(self.passed / self.total * 100, 2)

    @property
    def secure(self) -> bool:
        return self.passed == self.total


class S3SecurityProbe:
    """Probes a bucket for anonymous and invalid-credential access."""

    def __init__(
        self,
        config: S3ClientConfig,
        client_factory: Optional[Callable[..., Any]] = None,
        probe_key: str = DEFAULT_PROBE_KEY,
    ):
        """Initialize the security probe.

        Args:
            config: S3 client configuration (only bucket, region and endpoint
                are used; credentials are deliberately ignored)
            client_factory: Callable creating boto3 clients, for testing
            probe_key: Key used by the upload, download and delete probes
        """
        self.config = config
        self.client_factory = client_factory or boto3.client
        self.probe_key = probe_key
        logger.info("S3 security probe initialized", bucket=config.bucket)

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"region_name": self.config.region_name}
        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url
        return kwargs

    def anonymous_client(self):
        """Client that sends unsigned requests."""
        return self.client_factory(
            "s3", config=Config(signature_version=UNSIGNED), **self._client_kwargs()
        )

    def invalid_credentials_client(self):
        """Client signing requests with credentials that do not exist."""
        return self.client_factory(
            "s3",
            aws_access_key_id=INVALID_ACCESS_KEY,
            aws_secret_access_key=INVALID_SECRET_KEY,
            **self._client_kwargs(),
        )

    def _probe(
        self, number: int, name: str, action: Callable[[], Any], denied: str
    ) -> ProbeResult:
        """Run one probe; a rejected request means the bucket is protected."""
        try:
            action()
        except (ClientError, BotoCoreError) as e:
            result = ProbeResult(
                number=number,
                name=name,
                passed=True,
                message=f"{denied} as expected. Error: {e}",
            )
        else:
            result = ProbeResult(
                number=number,
                name=name,
                passed=False,
                message=(
                    f"WARNING: {name} succeeded. This is a security "
                    f"vulnerability; the bucket should be private."
                ),
            )

        log = logger.info if result.passed else logger.warning
        log("Security probe finished", probe=name, passed=result.passed)
        return result

    def run(self) -> SecurityReport:
        """Run every probe and collect the results."""
        bucket = self.config.bucket
        key = self.probe_key
        logger.info("Running security probes", bucket=bucket)

        anonymous = self.anonymous_client()
        invalid = self.invalid_credentials_client()

        report = SecurityReport(bucket=bucket)
        report.results.append(
            self._probe(
                1,
                "List Objects Without Credentials",
                lambda: anonymous.list_objects(Bucket=bucket, MaxKeys=1),
                "Access denied",
            )
        )
        report.results.append(
            self._probe(
                2,
                "Upload Without Credentials",
                lambda: anonymous.put_object(
                    Bucket=bucket,
                    Key=key,
                    Body=b"This is an unauthorized upload test",
                ),
                "Upload denied",
            )
        )
        report.results.append(
            self._probe(
                3,
                "Download Without Credentials",
                lambda: anonymous.get_object(Bucket=bucket, Key=key),
                "Download denied",
            )
        )
        report.results.append(
            self._probe(
                4,
                "Delete Without Credentials",
                lambda: anonymous.delete_object(Bucket=bucket, Key=key),
                "Delete denied",
            )
        )
        report.results.append(
            self._probe(
                5,
                "Access With Invalid Credentials",
                lambda: invalid.list_objects(Bucket=bucket, MaxKeys=1),
                "Access denied",
            )
        )

        logger.info(
            "Security probes completed",
            bucket=bucket,
            passed=report.passed,
            total=report.total,
        )
        return report


def check_bucket_security(
    config: S3ClientConfig, probe_key: str = DEFAULT_PROBE_KEY
) -> SecurityReport:
    """Convenience function to run all security probes against a bucket."""
    return S3SecurityProbe(config, probe_key=probe_key).run()
