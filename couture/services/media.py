"""
Contrôle des images avant envoi au backend (le serveur refait les mêmes vérifications)
"""
from typing import Optional
from fastapi import UploadFile
from pydantic import BaseModel

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB


class ImagePayload(BaseModel):
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def as_file(self):
        """Tuple attendu par httpx pour un champ multipart"""
        return (self.filename, self.content, self.content_type)


def validate_image_file(content_type: Optional[str], size: int) -> Optional[str]:
    if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        return "Type de fichier non supporté. Utilisez JPEG, PNG, GIF ou WebP"
    if size > MAX_IMAGE_SIZE:
        return "La taille du fichier ne doit pas dépasser 10MB"
    return None

async def read_upload(upload: Optional[UploadFile]) -> Optional[ImagePayload]:
    """None quand aucun fichier n'a été choisi dans le formulaire"""
    if upload is None or not getattr(upload, "filename", None):
        return None
    content = await upload.read()
    if not content:
        return None
    return ImagePayload(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        content=content,
    )
