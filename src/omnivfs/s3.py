"""S3-compatible object store backend (AWS S3, MinIO, ...)"""
import functools
import typing as t

import boto3
import zirconium as zr
from autoinject import injector
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, ConnectTimeoutError, EndpointConnectionError, ReadTimeoutError

from .exceptions import BackendError, ObjectNotFoundError
from .object_store import ObjectStat, ObjectStoreClient, ObjectStoreFileSystem
from .util import DEFAULT_CHUNK_SIZE, read_in_chunks


_RECOVERABLE_CODES = ('SlowDown', 'Throttling', 'ThrottlingException', 'RequestTimeout', 'ServiceUnavailable', 'InternalError', '500', '503')


def wrap_s3_errors(cb):

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except ClientError as ex:
            if S3Client.is_not_found(ex):
                raise ObjectNotFoundError(f"S3: Object not found: {str(ex)}") from ex
            error_code = str((ex.response.get('Error') or {}).get('Code') or '')
            if error_code in _RECOVERABLE_CODES:
                raise BackendError(f"S3: Service error: {ex.__class__.__name__}: {str(ex)}", 2001, True) from ex
            raise BackendError(f"S3: {ex.__class__.__name__}: {str(ex)}", 2000) from ex
        except (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as ex:
            raise BackendError(f"S3: Connection error: {ex.__class__.__name__}: {str(ex)}", 2002, True) from ex
        except BotoCoreError as ex:
            raise BackendError(f"S3: {ex.__class__.__name__}: {str(ex)}", 2000) from ex

    return _inner


class S3Client(ObjectStoreClient):
    """Whole-object operations on top of a boto3 S3 client."""

    def __init__(self, client, server_side_encryption: t.Optional[str] = "AES256"):
        self._client = client
        self._server_side_encryption = server_side_encryption

    @wrap_s3_errors
    def get(self, bucket: str, key: str, fileobj: t.BinaryIO):
        response = self._client.get_object(Bucket=bucket, Key=key)
        body = response['Body']
        try:
            for chunk in read_in_chunks(body, DEFAULT_CHUNK_SIZE):
                fileobj.write(chunk)
        finally:
            body.close()

    @wrap_s3_errors
    def put(self, bucket: str, key: str, fileobj: t.BinaryIO):
        extra_args = {}
        if self._server_side_encryption:
            extra_args["ServerSideEncryption"] = self._server_side_encryption
        self._client.upload_fileobj(fileobj, bucket, key, ExtraArgs=extra_args or None)

    @wrap_s3_errors
    def head(self, bucket: str, key: str) -> ObjectStat:
        data = self._client.head_object(Bucket=bucket, Key=key)
        return ObjectStat(
            size=data.get('ContentLength') or 0,
            last_modified=data.get('LastModified'),
        )

    @wrap_s3_errors
    def delete(self, bucket: str, key: str):
        self._client.delete_object(Bucket=bucket, Key=key)

    def supports_native_copy(self) -> bool:
        return True

    @wrap_s3_errors
    def native_copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str):
        copy_args = {
            'Bucket': dst_bucket,
            'Key': dst_key,
            'CopySource': {'Bucket': src_bucket, 'Key': src_key},
        }
        if self._server_side_encryption:
            copy_args['ServerSideEncryption'] = self._server_side_encryption
        self._client.copy_object(**copy_args)

    @staticmethod
    def is_not_found(ex: Exception) -> bool:
        if not isinstance(ex, ClientError):
            return False
        response = getattr(ex, 'response', {}) or {}
        status_code = (response.get('ResponseMetadata') or {}).get('HTTPStatusCode')
        error_code = str((response.get('Error') or {}).get('Code') or '')
        return status_code == 404 or error_code in ('404', 'NoSuchKey', 'NotFound')


class S3FileSystem(ObjectStoreFileSystem):
    """File system for an S3-compatible object store. The volume is the bucket name.

        The boto3 client is built from the [omnivfs.s3] configuration the first time it
        is needed, unless one is passed in.
    """

    config: zr.ApplicationConfig = None

    @injector.construct
    def __init__(self, client=None):
        super().__init__(S3Client(client, self.server_side_encryption()) if client is not None else None)

    def scheme(self) -> str:
        return "s3"

    def name(self) -> str:
        return "AWS S3"

    def server_side_encryption(self) -> t.Optional[str]:
        """Server-side encryption applied to uploads and copies. An empty value disables it."""
        return self.config.as_str(('omnivfs', 's3', 'server_side_encryption'), default="AES256") or None

    def _build_client(self) -> S3Client:
        client_kwargs = {
            'service_name': 's3',
            'verify': self.config.as_bool(('omnivfs', 's3', 'verify_ssl'), default=True),
        }
        for config_key, kwarg in (
                ('region', 'region_name'),
                ('endpoint_url', 'endpoint_url'),
                ('access_key_id', 'aws_access_key_id'),
                ('secret_access_key', 'aws_secret_access_key'),
                ('session_token', 'aws_session_token')):
            value = self.config.as_str(('omnivfs', 's3', config_key), default=None)
            if value:
                client_kwargs[kwarg] = value
        use_path_style = self.config.as_bool(('omnivfs', 's3', 'use_path_style'), default=False)
        client_kwargs['config'] = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path' if use_path_style else 'auto'}
        )
        self._log.debug(f"Building S3 client for endpoint [{client_kwargs.get('endpoint_url', 'default')}]")
        return S3Client(boto3.client(**client_kwargs), self.server_side_encryption())
