# tools/migrate_to_s3.py
# Copy every file in the local uploads directory into the S3 bucket.
import argparse
import logging
import os
from datetime import datetime, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

import config

logger = logging.getLogger("migrate-to-s3")


def migrate_files(uploads_dir, bucket, client, prefix=config.S3_KEY_PREFIX):
    """Upload each file; failures are logged and skipped. Returns (migrated, failed) names."""
    migrated, failed = [], []
    if not os.path.isdir(uploads_dir):
        logger.info("No uploads directory found. Nothing to migrate.")
        return migrated, failed

    files = sorted(f for f in os.listdir(uploads_dir)
                   if os.path.isfile(os.path.join(uploads_dir, f)))
    logger.info(f"Found {len(files)} files to migrate")

    for filename in files:
        try:
            with open(os.path.join(uploads_dir, filename), "rb") as f:
                body = f.read()
            client.put_object(
                Bucket=bucket,
                Key=f"{prefix}{filename}",
                Body=body,
                ContentType="audio/mpeg",
                Metadata={
                    "originalName": filename,
                    "uploadDate": datetime.now(timezone.utc).isoformat(),
                    "migrated": "true",
                },
            )
            logger.info(f"Migrated: {filename}")
            migrated.append(filename)
        except (OSError, BotoCoreError, ClientError) as e:
            logger.error(f"Failed to migrate {filename}: {e}")
            failed.append(filename)

    logger.info("Migration completed!")
    return migrated, failed


def main():
    parser = argparse.ArgumentParser(description="Migrate local uploads to S3")
    parser.add_argument("--uploads", type=str, default=config.UPLOADS_DIR)
    parser.add_argument("--bucket", type=str, default=config.S3_BUCKET_NAME)
    parser.add_argument("--region", type=str, default=config.AWS_REGION)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    logger.info("Starting migration to S3...")
    client = boto3.client("s3", region_name=args.region)
    _, failed = migrate_files(args.uploads, args.bucket, client)
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
