# tools/check_bucket_permissions.py
# Put, read back and delete a test object to confirm the upload path works.
import argparse
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

import config

logger = logging.getLogger("check-bucket-permissions")

TEST_KEY = "test-permissions.txt"
TEST_CONTENT = b"This is a test file to check permissions"
REQUIRED_PERMISSIONS = ["s3:PutObject", "s3:GetObject", "s3:DeleteObject"]


def check_bucket_permissions(client, bucket):
    """Returns the names of the steps that passed, in order; stops at the first failure."""
    steps = [
        ("upload", lambda: client.put_object(Bucket=bucket, Key=TEST_KEY, Body=TEST_CONTENT,
                                             ContentType="text/plain")),
        ("read", lambda: client.get_object(Bucket=bucket, Key=TEST_KEY)["Body"].read()),
        ("delete", lambda: client.delete_object(Bucket=bucket, Key=TEST_KEY)),
    ]
    passed = []
    logger.info(f"Testing permissions for bucket: {bucket}")
    for name, step in steps:
        try:
            step()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"{name.capitalize()} permission failed: {code}")
            if code in ("AccessDenied", "403"):
                logger.info(f"Your IAM user lacks the necessary S3 permissions: {', '.join(REQUIRED_PERMISSIONS)}")
            elif code == "NoSuchBucket":
                logger.info("The bucket does not exist or you cannot access it.")
            return passed
        except BotoCoreError as e:
            logger.error(f"{name.capitalize()} permission failed: {e}")
            logger.info("This might be a network or configuration issue.")
            return passed
        logger.info(f"{name.capitalize()} permission: OK")
        passed.append(name)

    logger.info("All bucket permissions are working correctly!")
    return passed


def main():
    parser = argparse.ArgumentParser(description="Check put/get/delete permissions on the bucket")
    parser.add_argument("--bucket", type=str, default=config.S3_BUCKET_NAME)
    parser.add_argument("--region", type=str, default=config.AWS_REGION)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    passed = check_bucket_permissions(boto3.client("s3", region_name=args.region), args.bucket)
    return 0 if len(passed) == 3 else 1


if __name__ == "__main__":
    raise SystemExit(main())
