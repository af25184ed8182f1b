"""
=============================================================================
UPLOADED FILES
=============================================================================

The multipart parser (an upstream collaborator) writes every uploaded part
to a temporary file and describes it with a FileDescriptor. The request
facade wraps each descriptor in an UploadedFile view.

    multipart body ──► parser ──► {"logo": FileDescriptor(...)}
                                          │
                                          ▼
                           request.file("logo") → UploadedFile

A field that was not uploaded still yields an UploadedFile, one whose
exists() is False, so call sites need no None checks:

    avatar = request.file("avatar", FileValidationOptions(size=2 * MB))
    if avatar.exists() and avatar.is_valid():
        avatar.move("/var/uploads")

=============================================================================
VALIDATION
=============================================================================

validate() runs once and collects every failure instead of raising:

    ┌──────────┬──────────────────────────────────────────────────────────┐
    │ kind     │ when                                                     │
    ├──────────┼──────────────────────────────────────────────────────────┤
    │ fatal    │ the field was not uploaded (nothing else is checked)     │
    │ size     │ declared size is above size_limit                        │
    │ extname  │ extension not in allowed_extensions                      │
    └──────────┴──────────────────────────────────────────────────────────┘

=============================================================================
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
import logging
import shutil

from ..exceptions import FileMoveError
from .mime_types import extension_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileDescriptor:
    """One uploaded part, as produced by the multipart parser."""

    field_name: str
    client_name: str
    tmp_path: str
    size: int = 0
    type: str = "application/octet-stream"


@dataclass(frozen=True)
class FileValidationOptions:
    """
    Limits supplied by a validation layer.

    size:     maximum size in bytes
    extnames: allowed extensions, with or without the leading dot
    """

    size: Optional[int] = None
    extnames: Optional[List[str]] = None


@dataclass(frozen=True)
class FileError:
    """A single validation failure."""

    kind: str
    message: str
    field_name: str = ""
    client_name: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.kind,
            "message": self.message,
            "fieldName": self.field_name,
            "clientName": self.client_name,
        }


def _normalize_extensions(extensions: Optional[Iterable[str]]) -> Optional[List[str]]:
    if extensions is None:
        return None
    return [ext.strip().lower().lstrip(".") for ext in extensions if ext and ext.strip()]


class UploadedFile:
    """
    View over one uploaded file, or over a missing upload.

    Args:
        descriptor: The parser's description, None for a missing upload.
        field_name: Form field name; taken from the descriptor when given.
        size_limit: Maximum accepted size in bytes.
        allowed_extensions: Accepted extensions ("png" or ".png").
    """

    def __init__(
        self,
        descriptor: Optional[FileDescriptor] = None,
        field_name: str = "",
        size_limit: Optional[int] = None,
        allowed_extensions: Optional[Iterable[str]] = None,
    ):
        self._descriptor = descriptor
        self.field_name = descriptor.field_name if descriptor else field_name
        self.size_limit = size_limit
        self.allowed_extensions = _normalize_extensions(allowed_extensions)
        self.errors: List[FileError] = []
        self.file_path: Optional[str] = descriptor.tmp_path if descriptor else None
        self._validated = False
        self._moved = False

    def __repr__(self) -> str:
        if self._descriptor is None:
            return f"<UploadedFile {self.field_name!r} [missing]>"
        return f"<UploadedFile {self.field_name!r} {self.client_name!r} [{self.size} bytes]>"

    # =========================================================================
    # DESCRIPTOR FACTS
    # =========================================================================

    def exists(self) -> bool:
        """True only for a file the multipart parser actually produced."""
        return self._descriptor is not None

    @property
    def client_name(self) -> str:
        return self._descriptor.client_name if self._descriptor else ""

    @property
    def size(self) -> int:
        return self._descriptor.size if self._descriptor else 0

    @property
    def type(self) -> Optional[str]:
        return self._descriptor.type if self._descriptor else None

    @property
    def tmp_path(self) -> Optional[str]:
        return self._descriptor.tmp_path if self._descriptor else None

    @property
    def moved(self) -> bool:
        return self._moved

    def extname(self) -> Optional[str]:
        """
        Extension without the dot, lower-cased.

        Taken from the client file name; falls back to the declared media
        type when the name has no extension ("blob" + image/png → "png").
        """
        if self._descriptor is None:
            return None

        suffix = Path(self.client_name).suffix
        if suffix:
            return suffix[1:].lower()
        return extension_for(self.type)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def apply_options(self, options: Optional[FileValidationOptions]) -> "UploadedFile":
        """
        Attach limits that are not already set on this view.

        Limits set earlier (for example from FacadeConfig defaults passed
        by the facade) are left alone. A new limit discards an earlier
        validate() result, so the next check runs against it.
        """
        if options is None:
            return self

        changed = False
        if self.size_limit is None and options.size is not None:
            self.size_limit = options.size
            changed = True
        if self.allowed_extensions is None and options.extnames is not None:
            self.allowed_extensions = _normalize_extensions(options.extnames)
            changed = True

        if changed:
            self._validated = False
            self.errors.clear()
        return self

    def validate(self) -> List[FileError]:
        """
        Run presence, size and extension checks once per set of limits.

        Returns:
            The collected errors (also available as `errors`).
        """
        if self._validated:
            return self.errors
        self._validated = True

        if self._descriptor is None:
            self._report("fatal", "File not uploaded")
            return self.errors

        if self.size_limit is not None and self.size > self.size_limit:
            self._report(
                "size",
                f"File size should be less than {self.size_limit} bytes",
            )

        if self.allowed_extensions:
            extension = self.extname()
            if extension not in self.allowed_extensions:
                allowed = ", ".join(self.allowed_extensions)
                self._report(
                    "extname",
                    f"Invalid file extension {extension or '(none)'}. "
                    f"Only {allowed} are allowed",
                )

        return self.errors

    def is_valid(self) -> bool:
        """Validate (if not done yet) and report whether no error was found."""
        return not self.validate()

    def _report(self, kind: str, message: str) -> None:
        logger.debug("Upload %r failed %s check: %s", self.field_name, kind, message)
        self.errors.append(FileError(kind, message, self.field_name, self.client_name))

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def move(self, destination: str | Path, name: Optional[str] = None) -> Path:
        """
        Move the temporary file into `destination`.

        Args:
            destination: Target directory, created when missing.
            name: New file name; defaults to the client file name.

        Returns:
            The final path.

        Raises:
            FileMoveError: The upload is missing, invalid or already moved.
        """
        if not self.exists():
            raise FileMoveError("Cannot move a file that was not uploaded", self.field_name)
        if self._moved:
            raise FileMoveError(f"File {self.client_name!r} was already moved", self.field_name)
        if not self.is_valid():
            raise FileMoveError(
                f"Cannot move invalid file: {self.errors[0].message}",
                self.field_name,
            )

        target_dir = Path(destination)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / (name or Path(self.client_name).name)

        try:
            shutil.move(self.file_path, target)
        except OSError as e:
            raise FileMoveError(f"Failed to move {self.client_name!r}: {e}", self.field_name) from e

        logger.info("Moved upload %r to %s", self.field_name, target)
        self.file_path = str(target)
        self._moved = True
        return target

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary, e.g. for error reporting."""
        return {
            "fieldName": self.field_name,
            "clientName": self.client_name,
            "size": self.size,
            "type": self.type,
            "extname": self.extname(),
            "exists": self.exists(),
            "filePath": self.file_path,
            "errors": [error.to_dict() for error in self.errors],
        }
