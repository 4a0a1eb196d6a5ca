"""Google Cloud Storage backend"""
import functools
import typing as t

import zirconium as zr
from autoinject import injector
from google.api_core import exceptions as gapi_exceptions
from google.cloud import storage as gcs

from .exceptions import BackendError, ObjectNotFoundError
from .object_store import ObjectStat, ObjectStoreClient, ObjectStoreFileSystem


def wrap_gs_errors(cb):

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except gapi_exceptions.NotFound as ex:
            raise ObjectNotFoundError(f"GCS: Object not found: {str(ex)}") from ex
        except (gapi_exceptions.TooManyRequests, gapi_exceptions.ServiceUnavailable, gapi_exceptions.GatewayTimeout,
                gapi_exceptions.InternalServerError) as ex:
            raise BackendError(f"GCS: Service error: {ex.__class__.__name__}: {str(ex)}", 3001, True) from ex
        except gapi_exceptions.GoogleAPIError as ex:
            raise BackendError(f"GCS: {ex.__class__.__name__}: {str(ex)}", 3000) from ex

    return _inner


class GSClient(ObjectStoreClient):
    """Whole-object operations on top of a google-cloud-storage client."""

    def __init__(self, client):
        self._client = client

    def _blob(self, bucket: str, key: str):
        return self._client.bucket(bucket).blob(key)

    @wrap_gs_errors
    def get(self, bucket: str, key: str, fileobj: t.BinaryIO):
        self._blob(bucket, key).download_to_file(fileobj)

    @wrap_gs_errors
    def put(self, bucket: str, key: str, fileobj: t.BinaryIO):
        self._blob(bucket, key).upload_from_file(fileobj)

    @wrap_gs_errors
    def head(self, bucket: str, key: str) -> ObjectStat:
        blob = self._client.bucket(bucket).get_blob(key)
        if blob is None:
            raise ObjectNotFoundError(f"GCS: Object not found: gs://{bucket}/{key}")
        return ObjectStat(size=blob.size or 0, last_modified=blob.updated)

    @wrap_gs_errors
    def delete(self, bucket: str, key: str):
        self._blob(bucket, key).delete()

    def supports_native_copy(self) -> bool:
        return True

    @wrap_gs_errors
    def native_copy(self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str):
        source_bucket = self._client.bucket(src_bucket)
        source_bucket.copy_blob(source_bucket.blob(src_key), self._client.bucket(dst_bucket), dst_key)

    @staticmethod
    def is_not_found(ex: Exception) -> bool:
        return isinstance(ex, gapi_exceptions.NotFound)


class GSFileSystem(ObjectStoreFileSystem):
    """File system for Google Cloud Storage. The volume is the bucket name."""

    config: zr.ApplicationConfig = None

    @injector.construct
    def __init__(self, client=None):
        super().__init__(GSClient(client) if client is not None else None)

    def scheme(self) -> str:
        return "gs"

    def name(self) -> str:
        return "Google Cloud Storage"

    def _build_client(self) -> GSClient:
        project = self.config.as_str(("omnivfs", "gs", "project"), default=None)
        credentials_file = self.config.as_str(("omnivfs", "gs", "credentials_file"), default=None)
        if credentials_file:
            self._log.debug("Building GCS client from service account file")
            return GSClient(gcs.Client.from_service_account_json(credentials_file, project=project))
        return GSClient(gcs.Client(project=project))
