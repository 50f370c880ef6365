"""
Integration tests for the attachment extractor.

These tests run the Lambda handler against moto-mocked S3 with the
webhook transport patched, exercising the real client wrappers.
"""
