"""
S3 material download task.

Downloads uploaded course materials to a local temp directory for parsing.

Dependencies: boto3
System role: First stage of material ingestion
"""

import os
import shutil
import tempfile
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

from studyloop.core.exceptions import StorageDownloadError


class S3DownloadTask:
    """Download materials from S3 to a local temp directory."""

    def __init__(self, bucket: str, region: str, s3_client=None) -> None:
        """
        Initialize S3 download task.

        Args:
            bucket: S3 bucket holding uploaded materials
            region: AWS region for the bucket
            s3_client: Pre-built boto3 S3 client (created if None)
        """
        self._bucket = bucket
        self._s3_client = s3_client or boto3.client("s3", region_name=region)

    def download(self, s3_key: str, material_id: str | None = None) -> str:
        """
        Download a material to a fresh temp directory.

        Args:
            s3_key: Object key (e.g. "courses/<course>/materials/file.pdf")
            material_id: Material being ingested (error context only)

        Returns:
            str: Local file path of the downloaded material

        Raises:
            StorageDownloadError: When the key is invalid or the download fails
        """
        filename = Path(s3_key).name if s3_key else ""
        if not filename:
            raise StorageDownloadError(f"Invalid S3 key: {s3_key!r}", material_id)

        temp_dir = tempfile.mkdtemp(prefix="studyloop_material_")
        local_path = os.path.join(temp_dir, filename)

        try:
            self._s3_client.download_file(
                Bucket=self._bucket,
                Key=s3_key,
                Filename=local_path,
            )
            return local_path
        except ClientError as e:
            shutil.rmtree(temp_dir, ignore_errors=True)
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise StorageDownloadError(
                    f"File not found in S3: {s3_key}", material_id, {"s3_key": s3_key}
                ) from e
            raise StorageDownloadError(
                f"Failed to download from S3: {e}", material_id, {"s3_key": s3_key}
            ) from e
