"""
Upload a file in chunks
"""
import asyncio
from chunkup import ChunkedUploader, TransferFailure


async def main():
    async with ChunkedUploader(endpoint="https://example.com/upload", token="upload-token") as uploader:

        # Simple upload (1 MB chunks, 3 parallel connections)
        outcome = await uploader.upload("backup.tar")
        print(f"Uploaded {outcome.chunks_uploaded} chunks")

        # Upload bytes held in memory
        outcome = await uploader.upload(b"hello world" * 100000)
        print(f"Uploaded {outcome.chunks_uploaded} chunks")

        # Failed chunks raise once their retries are exhausted
        try:
            await uploader.upload("large_file.zip")
        except TransferFailure as e:
            print(f"Upload failed at chunk {e.chunk_number}: {e.message}")


if __name__ == "__main__":
    asyncio.run(main())
