"""Supabase Storage backed image store."""

import asyncio
import hashlib
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from food_ledger.domain.intake import ImageFile
from food_ledger.services.entries import AssetStore

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def asset_path(user_id: UUID, image: ImageFile) -> str:
    """Return the content-addressed object path for an image."""
    digest = hashlib.sha256(image.data).hexdigest()
    extension = _EXTENSIONS.get(image.content_type.lower(), "jpg")
    return f"{user_id}/{digest}.{extension}"


@dataclass
class SupabaseAssetStore(AssetStore):
    """Uploads images to a Supabase Storage bucket."""

    client: Client
    bucket: str

    async def upload(self, user_id: UUID, image: ImageFile) -> str:
        """Upload the image and return its public URL."""
        return await asyncio.to_thread(self._upload, user_id, image)

    def _upload(self, user_id: UUID, image: ImageFile) -> str:
        path = asset_path(user_id, image)
        storage = self.client.storage.from_(self.bucket)
        storage.upload(
            path=path,
            file=image.data,
            file_options={"content-type": image.content_type, "upsert": "true"},
        )
        public_url = storage.get_public_url(path)
        if not public_url:
            raise RuntimeError("Supabase returned no public URL")
        return public_url
