"""S3 client management and the object store facade."""

from .s3_client import ObjectStoreClient, S3ClientConfig, S3ClientManager

__all__ = ["ObjectStoreClient", "S3ClientConfig", "S3ClientManager"]
