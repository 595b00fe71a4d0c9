"""
Checksums and encryption
"""
import asyncio
from pathlib import Path
from chunkup import ChunkedUploader


async def main():
    # One md5 checksum of the whole file, sent with every chunk
    async with ChunkedUploader(
        endpoint="https://example.com/upload",
        token="upload-token",
        checksum=True
    ) as uploader:
        await uploader.upload("document.pdf")

    # A sha256 checksum per chunk, chunks encrypted for the receiver's key
    async with ChunkedUploader(
        endpoint="https://example.com/upload",
        token="upload-token",
        checksum=True,
        checksum_incremental=True,
        checksum_algorithm="sha256",
        encrypt=True,
        encryption_public_key=Path("receiver.pem").read_bytes()
    ) as uploader:
        outcome = await uploader.upload("secrets.db")
        print(f"Uploaded {outcome.chunks_uploaded} encrypted chunks")


if __name__ == "__main__":
    asyncio.run(main())
