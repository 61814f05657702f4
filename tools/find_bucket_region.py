# tools/find_bucket_region.py
# Try the common AWS regions until HeadBucket succeeds.
import argparse
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

import config

logger = logging.getLogger("find-bucket-region")

REGIONS = [
    "us-east-1", "us-east-2", "us-west-1", "us-west-2",
    "af-south-1", "ap-east-1", "ap-south-1", "ap-northeast-1",
    "ap-northeast-2", "ap-northeast-3", "ap-southeast-1", "ap-southeast-2",
    "ca-central-1", "eu-central-1", "eu-west-1", "eu-west-2",
    "eu-west-3", "eu-north-1", "eu-south-1", "me-south-1",
    "sa-east-1",
]


def default_client_factory(region):
    return boto3.client("s3", region_name=region)


def find_bucket_region(bucket, regions=REGIONS, client_factory=default_client_factory):
    logger.info(f"Searching for bucket: {bucket}")
    for region in regions:
        logger.info(f"Trying region: {region}...")
        try:
            client_factory(region).head_bucket(Bucket=bucket)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            if code in ("404", "NoSuchBucket"):
                logger.info(f"  Bucket not found in {region}")
            elif code not in ("301", "PermanentRedirect"):
                logger.info(f"  Error in {region}: {code}")
            continue
        except BotoCoreError as e:
            logger.info(f"  Error in {region}: {e}")
            continue

        logger.info(f"Found bucket in region: {region}")
        return region

    logger.warning("Could not find the bucket in any common region. Check the bucket name, "
                   "that it exists in your account and that your credentials can access it.")
    return None


def main():
    parser = argparse.ArgumentParser(description="Find which region an S3 bucket lives in")
    parser.add_argument("--bucket", type=str, default=config.S3_BUCKET_NAME)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    region = find_bucket_region(args.bucket)
    if region is None:
        return 1
    print(f"Update your environment with:\nAWS_REGION={region}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
