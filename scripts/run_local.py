#!/usr/bin/env python3
"""
Local Runner for the ExtractAttachments Lambda

Usage:
    # Show which attachments of a local .eml file would be extracted
    python scripts/run_local.py --eml path/to/message.eml

    # Invoke the handler against a real (or LocalStack) bucket object
    ATTACHMENT_BUCKET=... WEBHOOK_URL=... \\
        python scripts/run_local.py --bucket raw-mail --key inbox/msg.eml

    # Print the S3 event that would be sent, without invoking
    python scripts/run_local.py --bucket raw-mail --key inbox/msg.eml --dry-run
"""

import argparse
import json
import sys
from pathlib import Path
from urllib.parse import quote_plus

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import structlog  # noqa: E402

log = structlog.get_logger()


def build_s3_event(bucket: str, key: str) -> dict:
    """S3 ObjectCreated notification for a single object."""
    return {
        "Records": [
            {
                "eventSource": "aws:s3",
                "eventName": "ObjectCreated:Put",
                "s3": {
                    "bucket": {"name": bucket},
                    "object": {"key": quote_plus(key, safe="/")},
                },
            }
        ]
    }


def inspect_eml(path: Path) -> int:
    """Decode a local email and print the extraction decision per attachment."""
    from lambdas.extract_attachments.attachment_filter import qualifies
    from lambdas.extract_attachments.email_parser import decode_envelope
    from lambdas.extract_attachments.paths import destination_key, directory_marker

    envelope = decode_envelope(path.read_bytes())

    print(f"Subject: {envelope.subject}")
    print(f"rm_dir:  {directory_marker(str(path))}")
    print(f"Attachments: {len(envelope.attachments)}")

    for part in envelope.attachments:
        decision = destination_key(part.filename) if qualifies(part.filename) else "skipped"
        print(f"  {part.filename} ({part.content_type}, {part.size_bytes} bytes) -> {decision}")

    return 0


def invoke(bucket: str, key: str, dry_run: bool) -> int:
    event = build_s3_event(bucket, key)

    if dry_run:
        print(json.dumps(event, indent=2))
        return 0

    from lambdas.extract_attachments.handler import lambda_handler

    response = lambda_handler(event, None)
    print(json.dumps(json.loads(response["body"]), indent=2))
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the attachment extractor locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--eml", type=Path, help="Local raw email to inspect")
    parser.add_argument("--bucket", help="Source bucket of the raw email")
    parser.add_argument("--key", help="Object key of the raw email")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the S3 event instead of invoking the handler",
    )

    args = parser.parse_args()

    if args.eml:
        return inspect_eml(args.eml)

    if not (args.bucket and args.key):
        parser.error("either --eml or both --bucket and --key are required")

    return invoke(args.bucket, args.key, args.dry_run)


if __name__ == "__main__":
    sys.exit(main())
