"""Catalogue registry service against a temporary SQLite database."""

import io

from starlette.datastructures import Headers, UploadFile

from catalogue_admin.core.config import Settings, StorageSettings
from catalogue_admin.modules.catalogues import CatalogueService


class RecordingUpload(UploadFile):
    """Upload that remembers the size of every read request."""

    def __init__(self, data: bytes, filename: str = "Extruders.pdf") -> None:
        super().__init__(
            file=io.BytesIO(data),
            filename=filename,
            headers=Headers({"content-type": "application/pdf"}),
        )
        self.reads: list[int] = []

    async def read(self, size: int = -1) -> bytes:
        self.reads.append(size)
        return await super().read(size)


async def test_upload_reads_in_configured_chunks(session_factory, tmp_path):
    settings = Settings(storage=StorageSettings(catalogue_dir=tmp_path / "storage", chunk_size=4096))
    upload = RecordingUpload(b"%PDF-1.4 " + b"0" * 10_000)

    async with session_factory() as session:
        service = CatalogueService.with_session(session, settings)
        entry = await service.store_upload(uploader_id=None, upload=upload)
        await session.commit()

    assert service.chunk_size == 4096
    assert set(upload.reads) == {4096}
    assert entry.file_size == 10_009
    assert (tmp_path / "storage" / entry.file_name).stat().st_size == 10_009
