"""GitSnap: scheduled GitHub repository backups to S3 with OIDC access."""

__version__ = "1.0.0"
