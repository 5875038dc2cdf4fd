from xrd_ingestor.api.main import app


def run() -> None:
    import os

    import uvicorn

    host = os.getenv("XRD_INGESTOR_HOST", "0.0.0.0")
    port = int(os.getenv("XRD_INGESTOR_PORT", "8001"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
