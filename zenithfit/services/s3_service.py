"""
Meal photo storage on MinIO (S3 API via aiobotocore).

Only used when STORE_MEAL_PHOTOS is on; otherwise photos are analyzed and dropped.
"""
import uuid
from typing import Optional

from botocore.exceptions import ClientError
from fastapi import HTTPException, UploadFile

from zenithfit.core.config import settings

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


def _get_session():
    import aiobotocore.session
    scheme = "https" if settings.MINIO_SECURE else "http"
    return aiobotocore.session.get_session().create_client(
        "s3",
        endpoint_url=f"{scheme}://{settings.MINIO_ENDPOINT}",
        aws_access_key_id=settings.MINIO_ACCESS_KEY,
        aws_secret_access_key=settings.MINIO_SECRET_KEY,
        region_name="us-east-1",
    )


async def ensure_bucket_exists() -> None:
    async with _get_session() as client:
        try:
            await client.head_bucket(Bucket=settings.MINIO_BUCKET)
        except ClientError:
            await client.create_bucket(Bucket=settings.MINIO_BUCKET)


def validate_image(file: UploadFile, content: bytes) -> None:
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"'{file.content_type}' is not a supported photo format. Use JPEG, PNG or WEBP.",
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded image is empty.")
    if len(content) > MAX_FILE_SIZE:
        raise HTTPException(status_code=413, detail="Photo is larger than 10 MB.")


async def read_image(file: UploadFile) -> bytes:
    """Read an uploaded meal photo and validate it. Returns the raw bytes."""
    content = await file.read()
    validate_image(file, content)
    return content


def photo_key(user_id: int, filename: Optional[str], content_type: str) -> str:
    """meals/<user>/<random>.<ext>, the extension taken from the filename when it has one."""
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].lower()
    else:
        ext = ALLOWED_CONTENT_TYPES.get(content_type, "jpg")
    return f"meals/{user_id}/{uuid.uuid4().hex}.{ext}"


async def upload_meal_photo(user_id: int, file: UploadFile, content: bytes) -> str:
    """Store a meal photo in MinIO. Returns the object key."""
    key = photo_key(user_id, file.filename, file.content_type)
    async with _get_session() as client:
        await client.put_object(
            Bucket=settings.MINIO_BUCKET,
            Key=key,
            Body=content,
            ContentType=file.content_type,
        )
    return key


async def generate_presigned_url(s3_key: str, expires: Optional[int] = None) -> str:
    """Time-limited GET link for a stored photo, MEAL_PHOTO_URL_TTL seconds by default."""
    async with _get_session() as client:
        return await client.generate_presigned_url(
            "get_object",
            Params={"Bucket": settings.MINIO_BUCKET, "Key": s3_key},
            ExpiresIn=expires or settings.MEAL_PHOTO_URL_TTL,
        )
