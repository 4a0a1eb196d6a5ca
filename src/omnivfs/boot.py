import logging
import os
import pathlib

import zirconium as zr
import zrlog
from autoinject import injector

from .gs import GSFileSystem
from .local import LocalFileSystem
from .registry import FileSystemRegistry
from .s3 import S3FileSystem

__VERSION__ = "0.1.0"


def _config_paths():
    yield pathlib.Path(".").absolute()
    yield pathlib.Path("~").expanduser().absolute()
    custom_config_path = os.environ.get("OMNIVFS_CONFIG_SEARCH_PATHS", "./config")
    if custom_config_path:
        paths = custom_config_path.split(";")
        for path in paths:
            if path:
                p = pathlib.Path(path).absolute()
                if p.exists():
                    yield p


@injector.inject
def register_default_backends(registry: FileSystemRegistry = None):
    """Register the file, s3 and gs backends."""
    registry.register("file", LocalFileSystem)
    registry.register("s3", S3FileSystem)
    registry.register("gs", GSFileSystem)


def init_omnivfs():
    """Set up configuration and logging, then register the default backends."""

    @zr.configure
    def set_config(app_config: zr.ApplicationConfig):
        config_paths = [x for x in _config_paths()]
        logging.getLogger("omnivfs.boot").info(f"Config Search Paths: {';'.join(str(x) for x in config_paths)}")
        for path in config_paths:
            app_config.register_default_file(path / ".omnivfs.defaults.toml")
            app_config.register_file(path / ".omnivfs.toml")

    # boto's debug output includes request signatures
    logging.getLogger("botocore").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.INFO)

    zrlog.set_default_extra("version", __VERSION__)
    zrlog.init_logging()
    register_default_backends()
