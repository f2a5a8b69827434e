"""Product image uploads written to the local upload directory."""
import secrets
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Optional

from storefront.utils.logger import fmt_fields, get_logger

logger = get_logger("catalog.uploads")

IMAGES_ROUTE = "/images"
_SAVE_ATTEMPTS = 5


class ImageStorage:
    """Saves uploaded files as <field>_<epoch ms>_<random hex><ext> and builds their public URL."""

    def __init__(self, upload_dir: str, public_base_url: str) -> None:
        self.root = Path(upload_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def ensure_dir(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def build_filename(
        self,
        field_name: str,
        original_name: Optional[str],
        now_ms: Optional[int] = None,
        nonce: Optional[str] = None,
    ) -> str:
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        nonce = nonce if nonce is not None else secrets.token_hex(4)
        # only the extension of the client's name is kept
        suffix = Path(original_name or "").suffix
        return f"{field_name}_{stamp}_{nonce}{suffix}"

    def save(self, field_name: str, original_name: Optional[str], data: BinaryIO) -> str:
        """
        Write the upload under a fresh name and return that name.

        Files are opened exclusively, so an existing image is never
        overwritten; a name collision just draws a new one.
        """
        root = self.ensure_dir()
        for _ in range(_SAVE_ATTEMPTS):
            filename = self.build_filename(field_name, original_name)
            try:
                with open(root / filename, "xb") as out:
                    shutil.copyfileobj(data, out)
            except FileExistsError:
                logger.warning("uploads: method=save %s", fmt_fields(filename=filename, result="exists"))
                continue
            logger.info("uploads: method=save %s", fmt_fields(filename=filename, result="success"))
            return filename
        raise FileExistsError(f"could not find a free upload name under {root}")

    def public_url(self, filename: str) -> str:
        return f"{self.public_base_url}{IMAGES_ROUTE}/{filename}"
