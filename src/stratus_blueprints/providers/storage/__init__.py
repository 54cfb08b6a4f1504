from .bucket import CreateBucketProvider, LookupBucketProvider

__all__ = ["CreateBucketProvider", "LookupBucketProvider"]
