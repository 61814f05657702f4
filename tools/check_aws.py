# tools/check_aws.py
# Verify credentials (ListBuckets) and bucket access (HeadBucket).
import argparse
import logging
import os

import boto3
from botocore.exceptions import BotoCoreError, ClientError

import config

logger = logging.getLogger("check-aws")

HINTS = {
    "InvalidAccessKeyId": "This usually means your AWS Access Key ID is incorrect",
    "SignatureDoesNotMatch": "This usually means your AWS Secret Access Key is incorrect",
    "NoSuchBucket": "The bucket does not exist. You need to create it first.",
    "404": "The bucket does not exist. You need to create it first.",
    "AccessDenied": "Your IAM user does not have permission to access S3",
    "403": "Your IAM user does not have permission to access S3",
}


def report_environment():
    for name in ("AWS_REGION", "S3_BUCKET_NAME"):
        logger.info(f"{name}: {os.getenv(name) or 'not set'}")
    for name in ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"):
        logger.info(f"{name}: {'set' if os.getenv(name) else 'not set'}")


def check_aws(client, bucket):
    """Returns (ok, hint). hint is None on success or when no hint applies."""
    try:
        logger.info("Test 1: Testing credentials by listing buckets...")
        buckets = client.list_buckets().get("Buckets", [])
        logger.info("Credentials are valid")
        logger.info(f"Available buckets: {[b['Name'] for b in buckets]}")

        logger.info("Test 2: Checking if bucket exists...")
        if not bucket:
            logger.error("S3_BUCKET_NAME not set in environment variables")
            return False, None
        client.head_bucket(Bucket=bucket)
        logger.info(f'Bucket "{bucket}" exists and is accessible')
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "Unknown")
        logger.error(f"Test failed: {code}")
        hint = HINTS.get(code)
        if hint:
            logger.info(hint)
        return False, hint
    except BotoCoreError as e:
        logger.error(f"Test failed: {e}")
        return False, None

    logger.info("All tests passed! Your AWS S3 configuration is working correctly.")
    return True, None


def main():
    parser = argparse.ArgumentParser(description="Check AWS S3 configuration")
    parser.add_argument("--bucket", type=str, default=os.getenv("S3_BUCKET_NAME"))
    parser.add_argument("--region", type=str, default=config.AWS_REGION)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    report_environment()
    ok, _ = check_aws(boto3.client("s3", region_name=args.region), args.bucket)
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
