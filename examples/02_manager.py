"""
Drive the upload manager directly with callbacks
"""
import asyncio
from chunkup import UploadManager, request_upload_token


async def main():
    token = await request_upload_token("https://example.com/upload/token")

    options = {
        'endpoint': "https://example.com/upload",
        'token': token,
        'chunkSize': 5 * 1024 * 1024,
        'maxConcurrentConnections': 4,
        'maxRetriesPerConnection': 5,
        'retryBackoff': True,
    }

    def on_progress(progress):
        print(f"Progress: {progress.percentage:.1f}%")

    async with UploadManager(options, progress_callback=on_progress) as manager:
        outcome = await manager.upload(
            "video.mp4",
            on_success=lambda: print("Upload complete"),
            on_error=lambda failure: print(f"Upload failed: {failure.message}")
        )
        print(f"Success: {outcome.success}")


if __name__ == "__main__":
    asyncio.run(main())
