"""
File-system model store.

Layout: <root>/<language>/<kind>/<tag dir>/<version>.bin, one pickled object
per file. The default (empty) tag lives in "_default"; any other tag lives in
"t_" followed by the percent-encoded tag, so distinct tags never share a
directory. Writes go to a temporary file that is renamed into place, so
readers never observe a partially written artifact.
"""

import os
import pickle
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Union
from urllib.parse import quote

from lexiflow.core.config.settings import settings
from lexiflow.core.exceptions.custom_exceptions import StorageError
from lexiflow.core.logging.logger import get_logger
from lexiflow.models.descriptor import ModelDescriptor
from lexiflow.storage.base import ModelStore

logger = get_logger(__name__)

_DEFAULT_TAG_DIR = "_default"
_TAG_DIR_PREFIX = "t_"


def tag_dir_name(tag: str) -> str:
    """Directory name for a tag; injective over all tag strings."""
    if not tag:
        return _DEFAULT_TAG_DIR
    return _TAG_DIR_PREFIX + quote(tag, safe="")


class DiskModelStore(ModelStore):
    """Pickle-per-file store rooted at a directory."""

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root).expanduser() if root else settings.model_store_dir

    def _family_dir(self, descriptor: ModelDescriptor) -> Path:
        return (
            self.root
            / descriptor.language.value
            / quote(descriptor.kind, safe="")
            / tag_dir_name(descriptor.tag)
        )

    def _path(self, descriptor: ModelDescriptor) -> Path:
        return self._family_dir(descriptor) / f"{descriptor.version}.bin"

    def list_versions(self, descriptor: ModelDescriptor) -> List[int]:
        family_dir = self._family_dir(descriptor)
        if not family_dir.is_dir():
            return []
        versions = []
        for path in family_dir.glob("*.bin"):
            try:
                versions.append(int(path.stem))
            except ValueError:
                logger.debug(f"Ignoring unexpected file in model store: {path}")
        return sorted(versions)

    def _exists_exact(self, descriptor: ModelDescriptor) -> bool:
        return self._path(descriptor).is_file()

    def _load_exact(self, descriptor: ModelDescriptor) -> Any:
        path = self._path(descriptor)
        try:
            with open(path, "rb") as f:
                return pickle.load(f)
        except FileNotFoundError:
            raise self._not_found(descriptor) from None
        except Exception as e:
            # Unpickling can raise almost anything, e.g. ImportError for a moved class
            raise StorageError(
                f"Failed to read model {descriptor}: {e}",
                error_code="MODEL_READ_ERROR",
                details={"path": str(path), "error_type": type(e).__name__},
            ) from e

    def save(self, descriptor: ModelDescriptor, obj: Any) -> None:
        path = self._path(descriptor)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    pickle.dump(obj, f, protocol=pickle.HIGHEST_PROTOCOL)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, pickle.PicklingError, AttributeError, TypeError) as e:
            raise StorageError(
                f"Failed to write model {descriptor}: {e}",
                error_code="MODEL_WRITE_ERROR",
                details={"path": str(path), "error_type": type(e).__name__},
            ) from e
        logger.debug(f"Stored {descriptor} at {path}")
