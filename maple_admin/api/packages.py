"""
Packages API Client

Lists, creates, updates and deletes tour packages. Create and update are
multipart requests: the package document goes in the "packageData" field,
alongside up to three images and an optional PDF brochure.
"""

import json
import mimetypes
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from ..domain.package import MAX_IMAGES, Package
from ..exceptions import ValidationError
from ..utils.logger import log_operation
from .base import MapleAPIClient


class PackagesAPI(MapleAPIClient):
    """Client for /packages."""

    @log_operation("list_packages")
    def list_packages(self) -> List[Package]:
        payload = self._request("GET", "/packages", operation="list_packages")
        return self._build_records(payload, "list_packages", Package.from_dict)

    def get_package(self, package_id: str) -> Package:
        payload = self._request(
            "GET",
            f"/packages/{package_id}",
            operation="get_package",
            context={"package_id": package_id},
        )
        return Package.from_dict(self._unwrap_item(payload))

    @log_operation("create_package")
    def create_package(
        self,
        package: Package,
        images: Iterable[str] = (),
        brochure: Optional[str] = None,
    ) -> Package:
        """
        Create a package.

        Raises:
            ValidationError: If the form or attachments are invalid
        """
        payload = self._send_package("POST", "/packages", "create_package", package, images, brochure)
        return self._saved_package(payload, package)

    @log_operation("update_package")
    def update_package(
        self,
        package_id: str,
        package: Package,
        images: Iterable[str] = (),
        brochure: Optional[str] = None,
    ) -> Package:
        payload = self._send_package(
            "PUT", f"/packages/{package_id}", "update_package", package, images, brochure
        )
        saved = self._saved_package(payload, package)
        if not saved.package_id:
            saved.package_id = package_id
        return saved

    @log_operation("delete_package")
    def delete_package(self, package_id: str) -> None:
        self._request(
            "DELETE",
            f"/packages/{package_id}",
            operation="delete_package",
            context={"package_id": package_id},
        )

    def _send_package(
        self,
        method: str,
        path: str,
        operation: str,
        package: Package,
        images: Iterable[str],
        brochure: Optional[str],
    ) -> Any:
        package.validate()
        image_paths, brochure_path = validate_attachments(images, brochure)

        with ExitStack() as stack:
            files: List[Tuple[str, Tuple[str, Any, str]]] = []
            for image_path in image_paths:
                handle = stack.enter_context(open(image_path, "rb"))
                files.append(("images", (image_path.name, handle, _guess_type(image_path))))
            if brochure_path is not None:
                handle = stack.enter_context(open(brochure_path, "rb"))
                files.append(("pdfBrochure", (brochure_path.name, handle, "application/pdf")))

            return self._request(
                method,
                path,
                operation=operation,
                context={"title": package.title, "attachments": len(files)},
                data={"packageData": json.dumps(package.to_payload(), ensure_ascii=False)},
                files=files or None,
            )

    def _saved_package(self, payload: Any, submitted: Package) -> Package:
        record = self._unwrap_item(payload)
        if record.get("title"):
            return Package.from_dict(record)
        # Some responses only echo a message; keep what was sent
        saved = Package.from_dict(submitted.to_payload())
        saved.package_id = record.get("_id")
        return saved


def validate_attachments(
    images: Iterable[str], brochure: Optional[str]
) -> Tuple[List[Path], Optional[Path]]:
    """
    Check image and brochure paths before upload.

    Raises:
        ValidationError: too many images, missing files, or a non-PDF brochure
    """
    image_paths = [Path(image) for image in images or ()]
    if len(image_paths) > MAX_IMAGES:
        raise ValidationError(f"Maximum {MAX_IMAGES} images allowed")
    for image_path in image_paths:
        if not image_path.is_file():
            raise ValidationError(f"Image not found: {image_path}")
        if not _guess_type(image_path).startswith("image/"):
            raise ValidationError(f"Not an image file: {image_path}")

    brochure_path = Path(brochure) if brochure else None
    if brochure_path is not None:
        if brochure_path.suffix.lower() != ".pdf":
            raise ValidationError("Brochure must be a PDF file")
        if not brochure_path.is_file():
            raise ValidationError(f"Brochure not found: {brochure_path}")

    return image_paths, brochure_path


def _guess_type(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"
