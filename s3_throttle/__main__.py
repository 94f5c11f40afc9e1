"""Command line entry point for the throttled S3 client."""
import argparse
import logging
import os
import sys

from botocore.exceptions import BotoCoreError, ClientError

from .controller import NotConnectedError, S3ThrottleController
from .settings import SettingsStorage
from .utils import format_size, load_package_info

SECRET_ENV = "S3_THROTTLE_SECRET_KEY"


def build_parser() -> argparse.ArgumentParser:
    info = load_package_info()
    parser = argparse.ArgumentParser(prog="s3_throttle", description=info.summary)
    parser.add_argument("--version", action="version", version=f"%(prog)s {info.version or 'dev'}")
    parser.add_argument("--endpoint", default="", help="S3 endpoint URL")
    parser.add_argument("--region", default="", help="bucket location constraint")
    parser.add_argument("--access-key", default="", help="access key ID")
    parser.add_argument("--secret-key", default="", help=f"secret access key (or ${SECRET_ENV})")
    parser.add_argument("--settings", help="path of the JSON settings file")
    parser.add_argument("--pagination", choices=["token", "marker"],
                        help="listing API: token (ListObjectsV2) or marker (ListObjects)")
    parser.add_argument("--verbose", "-v", action="store_true", help="log every request")

    subparsers = parser.add_subparsers(dest="command", required=True)

    create_p = subparsers.add_parser("create-bucket", help="create a public-read bucket")
    create_p.add_argument("name", nargs="?", help="bucket name (random 'ecom-' name if omitted)")

    list_p = subparsers.add_parser("list", help="list one page of objects")
    list_p.add_argument("bucket")
    list_p.add_argument("--prefix")
    list_p.add_argument("--cursor", help="continuation cursor from a previous page")
    list_p.add_argument("--delimiter")

    size_p = subparsers.add_parser("size", help="sum the size of every object in a bucket")
    size_p.add_argument("bucket")
    size_p.add_argument("--prefix")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = SettingsStorage(args.settings).load()
    if args.pagination:
        settings.pagination = args.pagination
    controller = S3ThrottleController(settings)
    secret_key = args.secret_key or os.environ.get(SECRET_ENV, "")

    try:
        controller.connect(
            endpoint_url=args.endpoint,
            region=args.region,
            access_key=args.access_key,
            secret_key=secret_key,
        )

        if args.command == "create-bucket":
            bucket = controller.create_bucket(args.name)
            print(bucket.name)
        elif args.command == "list":
            page = controller.list_objects(
                args.bucket,
                prefix=args.prefix,
                cursor=args.cursor,
                delimiter=args.delimiter,
            )
            for prefix in page.prefixes:
                print(f"{'PRE':>12}  {prefix}")
            for item in page.items:
                print(f"{item.size:>12}  {item.key}")
            if page.has_more:
                print(f"next cursor: {page.cursor}")
        elif args.command == "size":
            result = controller.get_bucket_size(args.bucket, prefix=args.prefix)
            print(f"{result.bucket}: {result.size} bytes ({format_size(result.size)}), "
                  f"{result.object_count} objects")
    except (ClientError, BotoCoreError, NotConnectedError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
