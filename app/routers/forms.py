"""Helpers for reading the dashboard's multipart forms."""
from starlette.datastructures import FormData, UploadFile

from ..services.media import save_image


def text(form: FormData, name: str) -> str | None:
    value = form.get(name)
    if value is None or isinstance(value, UploadFile):
        return None
    value = value.strip()
    return value or None


def checkbox(form: FormData, name: str) -> bool:
    return (text(form, name) or "").lower() in ("on", "true", "1", "yes")


def split_list(value: str | None) -> list[str]:
    """One entry per line or comma."""
    if not value:
        return []
    parts = value.replace(",", "\n").splitlines()
    return [p.strip() for p in parts if p.strip()]


def fields(form: FormData, names) -> dict:
    """Non-empty text fields, ready for a pydantic model."""
    return {name: text(form, name) for name in names if text(form, name) is not None}


async def save_uploads(form: FormData, name: str, folder: str) -> list[str]:
    urls = []
    for upload in form.getlist(name):
        if isinstance(upload, UploadFile) and upload.filename:
            url = save_image(await upload.read(), upload.filename, folder=folder)
            if url:
                urls.append(url)
    return urls
